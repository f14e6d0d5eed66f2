"""
jobartifacts.core.models - Core Data Models
=============================================

This module defines the Pydantic data models that flow between the layers
of jobartifacts.

Model Hierarchy:
    Tags          → Who produced (or wants) an artifact? (identity)
    FileMetadata  → What did the storage listing return? (raw listing row)
    StorageFile   → A listed file plus the branch it was found on
    Result        → What was uploaded or downloaded? (receipt)

Data Flow:
    Tags ──→ Query Processor ──→ query string ──→ File Resolver
                                                     │
                          FileMetadata ──→ StorageFile (source_branch_id)
                                                     │
                                        Artifacts ──→ Result

Design Principles:
    1. Immutable: every model is frozen; "changes" produce copies
    2. Self-validating: Pydantic enforces types at creation
    3. Tag strings are built in one place (Tags.to_upload_tags)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from jobartifacts.core.config import CustomFilter


# =============================================================================
# Tag Vocabulary
# =============================================================================
# Every artifact file in storage carries these tags. Query processors and the
# file resolver use the same constants so the vocabulary stays in one place.
# =============================================================================
ARTIFACT_TAG = "artifact"
SHARED_TAG = "shared"
BRANCH_ID_PREFIX = "branchId-"
COMPONENT_ID_PREFIX = "componentId-"
CONFIG_ID_PREFIX = "configId-"
JOB_ID_PREFIX = "jobId-"
ORCHESTRATION_ID_PREFIX = "orchestrationId-"

FileId = Union[int, str]


def _now() -> datetime:
    """Current UTC timestamp."""
    return datetime.now(timezone.utc)


# =============================================================================
# Tags Model
# =============================================================================
class Tags(BaseModel):
    """Identity of a job run, expressed as storage tags.

    Constructed once per operation by the caller. The ``is_shared`` flag is
    switched with ``with_shared()``, which returns a new instance so that the
    "current" and "shared" sub-uploads of one call never alias each other.

    Attributes:
        branch_id: Branch the job runs on.
        component_id: Component that runs the job.
        config_id: Configuration of the job. None disables artifacts.
        job_id: Id of the running job.
        orchestration_id: Id of the orchestration the job belongs to.
        is_shared: True when tagging the orchestration-shared artifact.

    Example:
        >>> tags = Tags(branch_id="1", component_id="keboola.ex", config_id="123", job_id="42")
        >>> tags.to_upload_tags()
        ['artifact', 'branchId-1', 'componentId-keboola.ex', 'configId-123', 'jobId-42']
    """

    model_config = ConfigDict(frozen=True)

    branch_id: str = Field(description="Branch the job runs on")
    component_id: str = Field(description="Component that runs the job")
    config_id: Optional[str] = Field(
        default=None,
        description="Configuration id (None disables artifact operations)",
    )
    job_id: Optional[str] = Field(default=None, description="Id of the running job")
    orchestration_id: Optional[str] = Field(
        default=None,
        description="Orchestration the job is part of",
    )
    is_shared: bool = Field(
        default=False,
        description="Tag as an orchestration-shared artifact",
    )

    def with_shared(self, value: bool = True) -> Tags:
        """Return a copy with ``is_shared`` set to ``value``."""
        return self.model_copy(update={"is_shared": value})

    def with_branch(self, branch_id: str) -> Tags:
        """Return a copy pointing at another branch."""
        return self.model_copy(update={"branch_id": branch_id})

    def merge_with_filter(self, custom_filter: CustomFilter) -> Tags:
        """Return a copy whose identity is overridden by a custom filter.

        Only branch, component and config are taken from the filter, and
        only when set there.
        """
        return self.model_copy(update={
            "branch_id": custom_filter.branch_id or self.branch_id,
            "component_id": custom_filter.component_id or self.component_id,
            "config_id": custom_filter.config_id or self.config_id,
        })

    def to_upload_tags(self) -> list[str]:
        """Tags attached to an uploaded artifact file.

        Null ids are rendered as an empty value after the prefix.
        """
        result = [
            ARTIFACT_TAG,
            BRANCH_ID_PREFIX + self.branch_id,
            COMPONENT_ID_PREFIX + self.component_id,
            CONFIG_ID_PREFIX + (self.config_id or ""),
            JOB_ID_PREFIX + (self.job_id or ""),
        ]

        if self.is_shared:
            result.append(SHARED_TAG)
            result.append(ORCHESTRATION_ID_PREFIX + (self.orchestration_id or ""))

        return result


# =============================================================================
# File Metadata Model
# =============================================================================
class FileMetadata(BaseModel):
    """A single row returned by a storage listing."""

    model_config = ConfigDict(frozen=True)

    id: FileId = Field(description="Storage file id")
    name: str = Field(description="Stored file name")
    tags: list[str] = Field(default_factory=list, description="Tags on the file")
    created: datetime = Field(default_factory=_now, description="Creation time (UTC)")


# =============================================================================
# Storage File Model
# =============================================================================
class StorageFile(BaseModel):
    """A listed artifact file, resolved to the branch it must be fetched from.

    ``source_branch_id`` is not necessarily the branch in the file's tags:
    with per-branch storage a development branch may see files that live
    on the default branch, and those must be downloaded through the default
    branch's transport.
    """

    model_config = ConfigDict(frozen=True)

    id: FileId = Field(description="Storage file id")
    name: str = Field(description="Stored file name")
    tags: list[str] = Field(default_factory=list, description="Tags on the file")
    source_branch_id: str = Field(description="Branch whose transport produced this file")

    @classmethod
    def from_metadata(cls, metadata: FileMetadata, source_branch_id: str) -> StorageFile:
        return cls(
            id=metadata.id,
            name=metadata.name,
            tags=list(metadata.tags),
            source_branch_id=source_branch_id,
        )


# =============================================================================
# Result Model
# =============================================================================
class Result(BaseModel):
    """One completed upload or download."""

    model_config = ConfigDict(frozen=True)

    storage_file_id: FileId = Field(description="Storage id of the transferred file")
    is_shared: bool = Field(default=False, description="Transferred as a shared artifact")
