"""
jobartifacts.core.exceptions - Custom Exception Hierarchy
===========================================================

This module defines a structured exception hierarchy for jobartifacts.
Instead of catching generic Exception everywhere, components raise and catch
specific exception types that carry contextual information.

Exception Hierarchy:
    ArtifactsError (base)
        ├── ConfigurationError        - Invalid settings, malformed config file
        ├── ArtifactsTransferError    - Upload/download failed (wraps the cause)
        ├── ArchiveSizeExceededError  - Archive is over the configured ceiling
        ├── TagIntegrityError         - Listed file has a missing/duplicate jobId tag
        └── DateParseError            - ``date_since`` could not be understood

Collaborator errors (raised by transports and archivers, translated by the
Artifacts facade into ArtifactsTransferError):
    StorageClientError   - see jobartifacts.infrastructure.storage
    ArchiveProcessError  - see jobartifacts.infrastructure.archiver

Error Handling Flow:
    Transport raises StorageClientError
        → upload: Artifacts wraps it in ArtifactsTransferError and aborts the call
        → download: Artifacts logs a warning and skips that single file

Usage:
    >>> from jobartifacts.core.exceptions import ArtifactsTransferError
    >>> raise ArtifactsTransferError(
    ...     message="Error uploading file: connection reset",
    ...     details={"path": "/tmp/x/tmp/artifacts.tar.gz"},
    ... )
"""

from __future__ import annotations

from typing import Any, Optional, Union


# =============================================================================
# Base Exception
# =============================================================================
# All jobartifacts exceptions inherit from this base class. This allows
# catching all library-specific errors with a single except clause:
#
#   try:
#       artifacts.upload(tags, config)
#   except ArtifactsError as e:
#       logger.error(e.message, error_code=e.error_code, details=e.details)
# =============================================================================
class ArtifactsError(Exception):
    """Base exception for all jobartifacts errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code for programmatic handling.
            Convention: UPPER_SNAKE_CASE (e.g., "TRANSFER_FAILED").
        details: Arbitrary dict with additional debugging context.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "ARTIFACTS_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        # Call Exception.__init__ with the message so that str(exception) works
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize this exception to a dictionary.

        Returns:
            Dictionary with error_type, message, error_code, and details.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


# =============================================================================
# Configuration Error
# =============================================================================
class ConfigurationError(ArtifactsError):
    """Raised when settings or a configuration file are invalid.

    Example:
        >>> raise ConfigurationError(
        ...     message="Invalid YAML in jobartifacts.yaml",
        ...     details={"path": "jobartifacts.yaml"},
        ... )
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Transfer Error
# =============================================================================
# The single error kind that transport failures and archiving-tool failures
# are translated into. The original exception is kept as __cause__.
# =============================================================================
class ArtifactsTransferError(ArtifactsError):
    """Raised when an artifact could not be transferred to or from storage.

    Wraps both remote failures (StorageClientError) and local tooling
    failures (ArchiveProcessError). Use ``raise ... from exc`` so the
    original error stays reachable through ``__cause__``.

    Attributes:
        file_id: Storage file id involved in the transfer, when known.
    """

    def __init__(
        self,
        message: str,
        file_id: Optional[Union[str, int]] = None,
        error_code: str = "TRANSFER_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        if file_id is not None:
            enriched_details["file_id"] = file_id

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.file_id = file_id


# =============================================================================
# Archive Size Error
# =============================================================================
class ArchiveSizeExceededError(ArtifactsError):
    """Raised when a packed artifact is larger than the allowed ceiling.

    Fatal for the upload call: nothing from the oversized directory is
    uploaded.

    Attributes:
        size: Actual archive size in bytes.
        limit: Configured ceiling in bytes.
    """

    def __init__(
        self,
        message: str,
        size: int,
        limit: int,
        error_code: str = "ARCHIVE_TOO_LARGE",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["size"] = size
        enriched_details["limit"] = limit

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.size = size
        self.limit = limit


# =============================================================================
# Tag Integrity Error
# =============================================================================
class TagIntegrityError(ArtifactsError):
    """Raised when a listed storage file has no jobId tag or more than one.

    Always handled per file during download: the file is skipped with a
    warning and the rest of the batch proceeds.

    Attributes:
        file_id: Storage id of the offending file.
    """

    def __init__(
        self,
        message: str,
        file_id: Union[str, int],
        error_code: str = "TAG_INTEGRITY",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["file_id"] = file_id

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.file_id = file_id


# =============================================================================
# Date Parse Error
# =============================================================================
class DateParseError(ArtifactsError):
    """Raised when a ``date_since`` filter value cannot be parsed.

    Attributes:
        value: The raw expression that failed to parse.
    """

    def __init__(
        self,
        message: str,
        value: str,
        error_code: str = "INVALID_DATE",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["value"] = value

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.value = value
