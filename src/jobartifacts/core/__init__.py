"""
jobartifacts.core - Foundation Layer
======================================

This module contains the building blocks every other module depends on:

    - config:      ArtifactsSettings (deployment) and ArtifactsConfig (per job)
    - enums:       DownloadMode, UploadScope
    - models:      Tags, FileMetadata, StorageFile, Result
    - exceptions:  Exception hierarchy for structured error handling

Dependency Rule:
    core/ depends on NOTHING else in the jobartifacts package.
"""

from jobartifacts.core.config import (
    ArtifactsConfig,
    ArtifactsOptions,
    ArtifactsSettings,
    CustomConfig,
    CustomFilter,
    RunsConfig,
    RunsFilter,
    SharedConfig,
)
from jobartifacts.core.enums import DownloadMode, UploadScope
from jobartifacts.core.exceptions import (
    ArchiveSizeExceededError,
    ArtifactsError,
    ArtifactsTransferError,
    ConfigurationError,
    DateParseError,
    TagIntegrityError,
)
from jobartifacts.core.models import FileMetadata, Result, StorageFile, Tags

__all__ = [
    # Config
    "ArtifactsConfig",
    "ArtifactsOptions",
    "ArtifactsSettings",
    "CustomConfig",
    "CustomFilter",
    "RunsConfig",
    "RunsFilter",
    "SharedConfig",
    # Enums
    "DownloadMode",
    "UploadScope",
    # Models
    "FileMetadata",
    "Result",
    "StorageFile",
    "Tags",
    # Exceptions
    "ArtifactsError",
    "ArtifactsTransferError",
    "ArchiveSizeExceededError",
    "ConfigurationError",
    "DateParseError",
    "TagIntegrityError",
]
