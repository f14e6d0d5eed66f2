"""
jobartifacts.core.config - Configuration Management
=====================================================

Two kinds of configuration exist:

    1. ArtifactsSettings - deployment-wide settings (size ceiling, listing
       limits, archive file name). Loaded with the following priority
       (highest first):

           a. Explicit constructor arguments, including the values of a
              YAML file read by load_config() (jobartifacts.yaml)
           b. Environment variables (prefixed with JOBARTIFACTS_)
           c. Default values defined in the models below

    2. ArtifactsConfig - per-job options, taken from the ``artifacts``
       section of a job configuration:

           artifacts:
             options: {zip: true}
             runs:    {enabled: true, filter: {limit: 10, date_since: "-7 days"}}
             custom:  {enabled: false, filter: {branch_id: ..., component_id: ..., config_id: ...}}
             shared:  {enabled: false}

Usage:
    # Deployment settings from environment variables:
    settings = ArtifactsSettings()

    # From a YAML file:
    settings = load_config("jobartifacts.yaml")

    # Job options:
    config = ArtifactsConfig.from_job_configuration(job["configuration"])

Environment Variables:
    JOBARTIFACTS_FILE_SIZE_LIMIT=1073741824
    JOBARTIFACTS_MAX_DOWNLOAD_LIMIT=50
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from jobartifacts.core.enums import DownloadMode
from jobartifacts.core.exceptions import ConfigurationError


# =============================================================================
# Job Configuration: options
# =============================================================================
class ArtifactsOptions(BaseModel):
    """Transfer options shared by upload and download.

    Attributes:
        zip: When True a directory travels as a single tar.gz archive.
            When False every file is transferred on its own.
    """

    zip: bool = Field(
        default=True,
        description="Archive directories before transfer (False = per-file transfer)",
    )


# =============================================================================
# Job Configuration: download filters
# =============================================================================
class RunsFilter(BaseModel):
    """Filter for downloading this configuration's previous runs."""

    limit: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum number of files listed (clamped to the download maximum)",
    )
    date_since: Optional[str] = Field(
        default=None,
        description="Only files created after this date ('2023-08-18', '-7 days', 'yesterday')",
    )


class CustomFilter(RunsFilter):
    """Filter for downloading artifacts of an arbitrary configuration.

    Any identity value left as None keeps the caller's own value.
    """

    branch_id: Optional[str] = Field(
        default=None,
        description="Branch to read artifacts from",
    )
    component_id: Optional[str] = Field(
        default=None,
        description="Component that produced the artifacts",
    )
    config_id: Optional[str] = Field(
        default=None,
        description="Configuration that produced the artifacts",
    )


class RunsConfig(BaseModel):
    """``artifacts.runs`` section."""

    enabled: bool = Field(default=False, description="Download previous runs")
    filter: RunsFilter = Field(default_factory=RunsFilter)


class CustomConfig(BaseModel):
    """``artifacts.custom`` section."""

    enabled: bool = Field(default=False, description="Download by custom filter")
    filter: CustomFilter = Field(default_factory=CustomFilter)


class SharedConfig(BaseModel):
    """``artifacts.shared`` section."""

    enabled: bool = Field(default=False, description="Download orchestration-shared artifacts")


# =============================================================================
# Job Configuration: root
# =============================================================================
class ArtifactsConfig(BaseModel):
    """Per-job artifacts configuration.

    Example:
        >>> config = ArtifactsConfig.from_job_configuration({
        ...     "artifacts": {"runs": {"enabled": True, "filter": {"limit": 5}}},
        ... })
        >>> config.download_mode()
        <DownloadMode.RUNS: 'runs'>
    """

    options: ArtifactsOptions = Field(default_factory=ArtifactsOptions)
    runs: RunsConfig = Field(default_factory=RunsConfig)
    custom: CustomConfig = Field(default_factory=CustomConfig)
    shared: SharedConfig = Field(default_factory=SharedConfig)

    @classmethod
    def from_job_configuration(cls, configuration: Optional[dict[str, Any]]) -> ArtifactsConfig:
        """Build the artifacts config from a full job configuration dict.

        A missing or empty ``artifacts`` key yields the defaults.
        """
        section = (configuration or {}).get("artifacts") or {}
        return cls.model_validate(section)

    def download_mode(self) -> Optional[DownloadMode]:
        """Return the enabled download mode with the highest priority.

        Priority: runs > custom > shared. None when nothing is enabled.
        """
        if self.runs.enabled:
            return DownloadMode.RUNS
        if self.custom.enabled:
            return DownloadMode.CUSTOM
        if self.shared.enabled:
            return DownloadMode.SHARED
        return None


# =============================================================================
# Deployment Settings
# =============================================================================
# Environment Variable Mapping:
#   JOBARTIFACTS_FILE_SIZE_LIMIT      → settings.file_size_limit
#   JOBARTIFACTS_MAX_DOWNLOAD_LIMIT   → settings.max_download_limit
# =============================================================================
class ArtifactsSettings(BaseSettings):
    """Deployment-wide settings for jobartifacts.

    Attributes:
        file_size_limit: Maximum size of an uploaded archive in bytes.
        max_download_limit: Ceiling applied to the runs/custom listing limit.
        archive_filename: Name of the archive staged under tmp/.
        temp_dir_prefix: Prefix of the temp root created per Artifacts instance.
    """

    file_size_limit: int = Field(
        default=2**30,
        ge=1,
        description="Maximum archive size in bytes (default 1 GiB)",
    )
    max_download_limit: int = Field(
        default=50,
        ge=1,
        description="Upper bound for runs/custom listing limits",
    )
    archive_filename: str = Field(
        default="artifacts.tar.gz",
        description="File name of the staged archive inside tmp/",
    )
    temp_dir_prefix: str = Field(
        default="artifacts-",
        description="Prefix for per-instance temporary workspace roots",
    )

    model_config = {
        "env_prefix": "JOBARTIFACTS_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }


# =============================================================================
# Configuration Loader
# =============================================================================
def load_config(path: Optional[str] = None) -> ArtifactsSettings:
    """Load settings from a YAML file and/or environment variables.

    Args:
        path: Path to a YAML file. If None, 'jobartifacts.yaml' in the
            current directory is used when present; otherwise defaults plus
            environment variables. Keys present in the file take
            precedence over the same JOBARTIFACTS_ environment variables.

    Returns:
        A validated ArtifactsSettings instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ConfigurationError: If the file is not valid YAML.
    """
    if path is None:
        default_path = Path("jobartifacts.yaml")
        if default_path.exists():
            path = str(default_path)

    yaml_data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(config_path) as f:
            try:
                raw_data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    message=f"Invalid YAML in configuration file {path}: {exc}",
                    details={"path": str(config_path)},
                ) from exc
            if isinstance(raw_data, dict):
                yaml_data = raw_data

    return ArtifactsSettings(**yaml_data)


def get_default_config() -> ArtifactsSettings:
    """Create settings from defaults and environment variables."""
    return ArtifactsSettings()
