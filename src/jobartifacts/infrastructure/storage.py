"""
jobartifacts.infrastructure.storage - Storage Transport Layer
===============================================================

This module defines the contract jobartifacts expects from the remote
object-tagging storage service, plus an in-memory implementation.

Architecture Context:
    The storage service is an external collaborator. Everything the
    library needs from it is captured by StorageTransport; a production
    deployment plugs in an adapter around its REST client, tests and local
    development use InMemoryStorageTransport.

    ┌──────────────┐   list/upload/download   ┌──────────────────────┐
    │  Artifacts   │ ───────────────────────→ │  StorageTransport     │
    │  FileResolver│                          │   ├── (REST adapter)  │
    └──────────────┘                          │   └── InMemory...     │
                                              └──────────────────────┘

Branch Scoping:
    A transport is bound to one branch. ``for_branch()`` returns a sibling
    transport for another branch (the default branch, typically). When the
    deployment uses real per-branch storage, each branch has its own file
    bucket; otherwise all branches share one bucket and are told apart by
    their ``branchId-`` tags only.

Usage:
    >>> backend = InMemoryStorageBackend(default_branch_id="100")
    >>> transport = backend.transport("100")
    >>> file_id = transport.upload_file("/tmp/artifacts.tar.gz", ["artifact", "jobId-1"])
    >>> transport.list_files("tags:(artifact)", limit=10)
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from jobartifacts.core.models import FileId, FileMetadata


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()


# =============================================================================
# Transport Error
# =============================================================================
class StorageClientError(Exception):
    """Raised by a transport when the storage service call fails.

    Attributes:
        status_code: HTTP-like status of the failed call, when known.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# =============================================================================
# Abstract Base Class
# =============================================================================
class StorageTransport(ABC):
    """Abstract interface to the storage service, scoped to one branch.

    Methods:
        list_files(query, limit): Search files by query.
        upload_file(path, tags): Upload a local file with tags.
        download_file(file_id, dest_path): Write a file's bytes to a path.
        for_branch(branch_id): Sibling transport for another branch.
        is_development_branch(): Is this transport's branch a dev branch?
        uses_per_branch_storage(): Does each branch have its own storage?
        default_branch_id(): Id of the default branch.
        current_branch_id(): Id of this transport's branch.

    All methods raise StorageClientError on service failures.
    """

    @abstractmethod
    def list_files(self, query: str, limit: Optional[int] = None) -> list[FileMetadata]:
        """Search files matching ``query``, newest first."""
        ...

    @abstractmethod
    def upload_file(self, path: Union[str, Path], tags: list[str]) -> FileId:
        """Upload the local file at ``path`` and return its storage id."""
        ...

    @abstractmethod
    def download_file(self, file_id: FileId, dest_path: Union[str, Path]) -> None:
        """Download the file's content into ``dest_path``."""
        ...

    @abstractmethod
    def for_branch(self, branch_id: str) -> StorageTransport:
        """Return a transport bound to ``branch_id``."""
        ...

    @abstractmethod
    def is_development_branch(self) -> bool:
        ...

    @abstractmethod
    def uses_per_branch_storage(self) -> bool:
        ...

    @abstractmethod
    def default_branch_id(self) -> str:
        ...

    @abstractmethod
    def current_branch_id(self) -> str:
        ...


# =============================================================================
# Query Evaluation (in-memory backend only)
# =============================================================================
_QUERY = re.compile(
    r"^tags:\((?P<tags>[^()]*)\)"
    r"(?:\s+AND\s+created:>(?P<since>\d{4}-\d{2}-\d{2}))?$"
)


@dataclass
class _TagQuery:
    required: list[str] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)
    created_after: Optional[date] = None

    def matches(self, metadata: FileMetadata) -> bool:
        tags = set(metadata.tags)
        if any(tag not in tags for tag in self.required):
            return False
        if any(tag in tags for tag in self.excluded):
            return False
        if self.created_after is not None and metadata.created.date() <= self.created_after:
            return False
        return True


def _parse_query(query: str) -> _TagQuery:
    match = _QUERY.match(query.strip())
    if match is None:
        raise StorageClientError(f"Unsupported query: {query}", status_code=400)

    parsed = _TagQuery()
    operator = "AND"
    for token in match.group("tags").split():
        if token in ("AND", "NOT"):
            operator = token
        elif operator == "NOT":
            parsed.excluded.append(token)
        else:
            parsed.required.append(token)

    if match.group("since"):
        parsed.created_after = date.fromisoformat(match.group("since"))

    return parsed


# =============================================================================
# In-Memory Backend
# =============================================================================
@dataclass
class _StoredFile:
    metadata: FileMetadata
    content: bytes
    sequence: int


class InMemoryStorageBackend:
    """Dict-based storage service for development and testing.

    Holds the files of every branch and hands out branch-bound transports.

    Features:
        - **Query evaluation**: understands the query grammar produced by
          the query processors (tag AND/NOT terms, ``created:>`` bound).
        - **Branch storage modes**: per-branch buckets or one shared bucket.
        - **Call History**: records every transport call for test assertions.
        - **Error Simulation**: can be configured to fail chosen operations.

    Attributes:
        default_branch_id: Id of the default (production) branch.
        use_branch_storage: True for real per-branch storage isolation.

    Example:
        >>> backend = InMemoryStorageBackend(default_branch_id="100", use_branch_storage=True)
        >>> dev = backend.transport("200")
        >>> dev.is_development_branch()
        True
    """

    def __init__(
        self,
        default_branch_id: str = "default",
        use_branch_storage: bool = False,
    ) -> None:
        self.default_branch_id = default_branch_id
        self.use_branch_storage = use_branch_storage

        self._buckets: dict[str, dict[FileId, _StoredFile]] = {}
        self._next_id = 1

        # --- Call Tracking ---
        self._call_history: list[dict[str, Any]] = []

        # --- Error Simulation ---
        self._failing_operations: set[str] = set()
        self._failing_downloads: set[FileId] = set()
        self._failure_message = "Mock storage API error"

        self._logger = logger.bind(component="in_memory_storage")

    # =========================================================================
    # Properties
    # =========================================================================
    @property
    def call_history(self) -> list[dict[str, Any]]:
        """All recorded transport calls (operation, branch_id, arguments)."""
        return self._call_history

    @property
    def call_count(self) -> int:
        return len(self._call_history)

    def calls(self, operation: str) -> list[dict[str, Any]]:
        """Recorded calls of one operation ("list", "upload", "download")."""
        return [c for c in self._call_history if c["operation"] == operation]

    # =========================================================================
    # Error Simulation
    # =========================================================================
    def set_should_fail(
        self,
        operation: str,
        should_fail: bool = True,
        message: str = "Mock storage API error",
    ) -> None:
        """Make every call of ``operation`` raise StorageClientError."""
        if should_fail:
            self._failing_operations.add(operation)
        else:
            self._failing_operations.discard(operation)
        self._failure_message = message

    def fail_download_of(self, file_id: FileId) -> None:
        """Make downloads of one particular file fail."""
        self._failing_downloads.add(file_id)

    # =========================================================================
    # Seeding / Inspection
    # =========================================================================
    def transport(self, branch_id: Optional[str] = None) -> InMemoryStorageTransport:
        """Return a transport bound to ``branch_id`` (default branch if None)."""
        return InMemoryStorageTransport(self, branch_id or self.default_branch_id)

    def add_file(
        self,
        name: str,
        content: bytes,
        tags: list[str],
        branch_id: Optional[str] = None,
        created: Optional[datetime] = None,
    ) -> FileId:
        """Store a file directly, bypassing the transport and call history."""
        file_id = self._next_id
        self._next_id += 1

        metadata = FileMetadata(
            id=file_id,
            name=name,
            tags=list(tags),
            created=created or datetime.now(timezone.utc),
        )
        bucket = self._bucket(branch_id or self.default_branch_id)
        bucket[file_id] = _StoredFile(metadata=metadata, content=content, sequence=file_id)
        return file_id

    def get_file(self, file_id: FileId, branch_id: Optional[str] = None) -> FileMetadata:
        """Metadata of a stored file (test helper)."""
        return self._stored(file_id, branch_id or self.default_branch_id).metadata

    def get_content(self, file_id: FileId, branch_id: Optional[str] = None) -> bytes:
        """Content of a stored file (test helper)."""
        return self._stored(file_id, branch_id or self.default_branch_id).content

    def count(self, branch_id: Optional[str] = None) -> int:
        return len(self._bucket(branch_id or self.default_branch_id))

    # =========================================================================
    # Operations used by InMemoryStorageTransport
    # =========================================================================
    def list_files(self, branch_id: str, query: str, limit: Optional[int]) -> list[FileMetadata]:
        self._record("list", branch_id, query=query, limit=limit)
        parsed = _parse_query(query)

        stored_files = [
            stored
            for stored in self._bucket(branch_id).values()
            if parsed.matches(stored.metadata)
        ]
        stored_files.sort(key=lambda s: (s.metadata.created, s.sequence), reverse=True)
        matches = [stored.metadata for stored in stored_files]
        if limit is not None:
            matches = matches[:limit]
        return matches

    def upload_file(self, branch_id: str, path: Union[str, Path], tags: list[str]) -> FileId:
        self._record("upload", branch_id, path=str(path), tags=list(tags))
        try:
            content = Path(path).read_bytes()
        except OSError as exc:
            raise StorageClientError(f"Cannot read file {path}: {exc}") from exc

        file_id = self.add_file(Path(path).name, content, tags, branch_id=branch_id)
        self._logger.debug("storage_file_uploaded", file_id=file_id, branch_id=branch_id)
        return file_id

    def download_file(self, branch_id: str, file_id: FileId, dest_path: Union[str, Path]) -> None:
        self._record("download", branch_id, file_id=file_id, dest_path=str(dest_path))
        if file_id in self._failing_downloads:
            raise StorageClientError(self._failure_message, status_code=500)

        stored = self._stored(file_id, branch_id)
        try:
            Path(dest_path).write_bytes(stored.content)
        except OSError as exc:
            raise StorageClientError(f"Cannot write file {dest_path}: {exc}") from exc

    # =========================================================================
    # Internal helpers
    # =========================================================================
    def _bucket(self, branch_id: str) -> dict[FileId, _StoredFile]:
        key = branch_id if self.use_branch_storage else self.default_branch_id
        return self._buckets.setdefault(key, {})

    def _stored(self, file_id: FileId, branch_id: str) -> _StoredFile:
        bucket = self._bucket(branch_id)
        if file_id not in bucket:
            raise StorageClientError(f"File {file_id} not found", status_code=404)
        return bucket[file_id]

    def _record(self, operation: str, branch_id: str, **arguments: Any) -> None:
        self._call_history.append({
            "operation": operation,
            "branch_id": branch_id,
            **arguments,
        })
        if operation in self._failing_operations:
            raise StorageClientError(self._failure_message, status_code=500)


# =============================================================================
# In-Memory Transport
# =============================================================================
class InMemoryStorageTransport(StorageTransport):
    """StorageTransport bound to one branch of an InMemoryStorageBackend.

    Not suitable for production: data lives only in the process memory.
    """

    def __init__(self, backend: InMemoryStorageBackend, branch_id: str) -> None:
        self._backend = backend
        self._branch_id = branch_id

    @property
    def backend(self) -> InMemoryStorageBackend:
        return self._backend

    def list_files(self, query: str, limit: Optional[int] = None) -> list[FileMetadata]:
        return self._backend.list_files(self._branch_id, query, limit)

    def upload_file(self, path: Union[str, Path], tags: list[str]) -> FileId:
        return self._backend.upload_file(self._branch_id, path, tags)

    def download_file(self, file_id: FileId, dest_path: Union[str, Path]) -> None:
        self._backend.download_file(self._branch_id, file_id, dest_path)

    def for_branch(self, branch_id: str) -> InMemoryStorageTransport:
        return InMemoryStorageTransport(self._backend, branch_id)

    def is_development_branch(self) -> bool:
        return self._branch_id != self._backend.default_branch_id

    def uses_per_branch_storage(self) -> bool:
        return self._backend.use_branch_storage

    def default_branch_id(self) -> str:
        return self._backend.default_branch_id

    def current_branch_id(self) -> str:
        return self._branch_id
