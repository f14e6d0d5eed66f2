"""
jobartifacts.infrastructure.archiver - Directory Archiving
============================================================

An Archiver packs a directory into a single compressed file and unpacks it
again. TarArchiver produces gzip-compressed tarballs whose members are
relative to the archived directory, so extracting into an empty directory
recreates the original tree.

Both operations raise ArchiveProcessError on any failure.
"""

from __future__ import annotations

import tarfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

import structlog


logger = structlog.get_logger()


class ArchiveProcessError(Exception):
    """Raised when packing or unpacking an archive fails."""


class Archiver(ABC):
    """Abstract interface for directory archiving."""

    @abstractmethod
    def archive(self, source_dir: Union[str, Path], dest_path: Union[str, Path]) -> None:
        """Pack the contents of ``source_dir`` into ``dest_path``."""
        ...

    @abstractmethod
    def extract(self, source_path: Union[str, Path], dest_dir: Union[str, Path]) -> None:
        """Unpack the archive at ``source_path`` into ``dest_dir``."""
        ...


class TarArchiver(Archiver):
    """gzip-compressed tar archives via the tarfile module."""

    def __init__(self) -> None:
        self._logger = logger.bind(component="tar_archiver")

    def archive(self, source_dir: Union[str, Path], dest_path: Union[str, Path]) -> None:
        source = Path(source_dir)
        if not source.is_dir():
            raise ArchiveProcessError(f"Directory {source} does not exist")

        try:
            with tarfile.open(dest_path, "w:gz") as tar:
                for entry in sorted(source.iterdir()):
                    tar.add(entry, arcname=entry.name)
        except (OSError, tarfile.TarError) as exc:
            raise ArchiveProcessError(f"Unable to archive {source}: {exc}") from exc

        self._logger.debug("directory_archived", source_dir=str(source), dest_path=str(dest_path))

    def extract(self, source_path: Union[str, Path], dest_dir: Union[str, Path]) -> None:
        destination = Path(dest_dir)
        try:
            destination.mkdir(parents=True, exist_ok=True)
            with tarfile.open(source_path, "r:gz") as tar:
                # "data" filter rejects members that would land outside destination
                tar.extractall(destination, filter="data")
        except (OSError, tarfile.TarError) as exc:
            raise ArchiveProcessError(f"Unable to extract {source_path}: {exc}") from exc

        self._logger.debug("archive_extracted", source_path=str(source_path), dest_dir=str(destination))
