"""
jobartifacts.infrastructure - Storage, Archiving & Workspace Layer
====================================================================

Architecture:
    ┌──────────────── FACADE ─────────────────────────────┐
    │  Artifacts (upload / download)                       │
    └─────────────┬────────────────────────┬──────────────┘
                  │                        │
    ┌─────────────▼──────────┐  ┌──────────▼──────────────┐
    │  Filesystem             │  │  StorageTransport (ABC)  │
    │   └── Archiver (ABC)    │  │   └── InMemory...        │
    │        └── TarArchiver  │  │                          │
    └─────────────────────────┘  └──────────────────────────┘

Components:
    - StorageTransport (ABC):   contract of the remote storage service
    - InMemoryStorageBackend:   dict-based storage for development/testing
    - InMemoryStorageTransport: branch-bound view of the in-memory backend
    - Archiver (ABC):           archive/extract contract
    - TarArchiver:              tar.gz implementation
    - Filesystem:               workspace directory layout + size policy
"""

from jobartifacts.infrastructure.archiver import (
    ArchiveProcessError,
    Archiver,
    TarArchiver,
)
from jobartifacts.infrastructure.filesystem import Filesystem, format_size
from jobartifacts.infrastructure.storage import (
    InMemoryStorageBackend,
    InMemoryStorageTransport,
    StorageClientError,
    StorageTransport,
)

__all__ = [
    "ArchiveProcessError",
    "Archiver",
    "Filesystem",
    "InMemoryStorageBackend",
    "InMemoryStorageTransport",
    "StorageClientError",
    "StorageTransport",
    "TarArchiver",
    "format_size",
]
