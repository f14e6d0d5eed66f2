"""
jobartifacts - Job Artifacts Client
=====================================

jobartifacts packages the output of a job run into archives, uploads them
to a tag-based object storage service, and retrieves them again for later
runs of the same configuration, for sibling jobs of one orchestration, or
for an explicitly chosen branch/component/configuration.

Layers (top to bottom):
    1. Facade          - Artifacts (upload / download orchestration)
    2. Services        - File resolution with branch fallback
    3. Tags            - Tags → storage query processors
    4. Infrastructure  - Storage transport, archiver, workspace layout
    5. Core            - Config, enums, models, exceptions

Quick Start:
    >>> from jobartifacts import Artifacts, ArtifactsConfig, Tags
    >>> artifacts = Artifacts(transport)
    >>> results = artifacts.upload(
    ...     Tags(branch_id="1", component_id="keboola.ex", config_id="123", job_id="42"),
    ...     ArtifactsConfig(),
    ... )
"""

# =============================================================================
# Package Version
# =============================================================================
__version__ = "0.1.0"

# =============================================================================
# Package-Level Exports
# =============================================================================
from jobartifacts.core.config import ArtifactsConfig, ArtifactsSettings
from jobartifacts.core.models import Result, StorageFile, Tags
from jobartifacts.facade import Artifacts

__all__ = [
    "Artifacts",
    "ArtifactsConfig",
    "ArtifactsSettings",
    "Result",
    "StorageFile",
    "Tags",
    "__version__",
]
