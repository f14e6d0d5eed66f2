"""
jobartifacts.infrastructure.filesystem - Workspace Layout
===========================================================

Deterministic directory tree used to stage uploads and receive downloads.
Everything lives under one temporary root owned by an Artifacts instance:

    <root>/
    ├── tmp/                          scratch space, staged archive
    │   └── artifacts.tar.gz
    └── data/
        └── artifacts/
            ├── out/                  filled by the job before upload
            │   ├── current/
            │   └── shared/
            └── in/                   created on demand by downloads
                ├── runs/<jobId>/
                ├── shared/<jobId>/
                └── custom/<jobId>/

The ``out`` directories and ``tmp`` exist right after construction; the
``in`` directories are only created when a download needs them.

The layout also owns the archive size policy (``check_file_size``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import structlog

from jobartifacts.core.enums import DownloadMode, UploadScope
from jobartifacts.core.exceptions import ArchiveSizeExceededError
from jobartifacts.infrastructure.archiver import Archiver, TarArchiver


logger = structlog.get_logger()

DEFAULT_FILE_SIZE_LIMIT = 2**30

_SIZE_UNITS = ("B", "KiB", "MiB", "GiB", "TiB")


def format_size(size: float) -> str:
    """Human readable binary size, e.g. ``1.00 GiB``."""
    for unit in _SIZE_UNITS[:-1]:
        if abs(size) < 1024:
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} {_SIZE_UNITS[-1]}"


class Filesystem:
    """Workspace directory tree of one Artifacts instance.

    Attributes:
        root: Temporary root directory.
        file_size_limit: Maximum allowed archive size in bytes.

    Example:
        >>> fs = Filesystem(Path("/tmp/job-123"))
        >>> fs.upload_current_dir
        PosixPath('/tmp/job-123/data/artifacts/out/current')
        >>> fs.download_job_dir(DownloadMode.RUNS, "42")  # created on demand
        PosixPath('/tmp/job-123/data/artifacts/in/runs/42')
    """

    def __init__(
        self,
        root: Union[str, Path],
        archiver: Optional[Archiver] = None,
        file_size_limit: int = DEFAULT_FILE_SIZE_LIMIT,
        archive_filename: str = "artifacts.tar.gz",
    ) -> None:
        self.root = Path(root)
        self.file_size_limit = file_size_limit
        self._archiver = archiver or TarArchiver()
        self._archive_filename = archive_filename

        self.tmp_dir = self.root / "tmp"
        self.data_dir = self.root / "data"
        self.artifacts_dir = self.data_dir / "artifacts"
        self.upload_current_dir = self.artifacts_dir / "out" / UploadScope.CURRENT.value
        self.upload_shared_dir = self.artifacts_dir / "out" / UploadScope.SHARED.value
        self.download_dir = self.artifacts_dir / "in"

        for path in (self.tmp_dir, self.upload_current_dir, self.upload_shared_dir):
            path.mkdir(parents=True, exist_ok=True)

        self._logger = logger.bind(component="artifacts_filesystem", root=str(self.root))

    # =========================================================================
    # Paths
    # =========================================================================
    @property
    def archive_path(self) -> Path:
        """Where archives are staged before upload and after download."""
        return self.tmp_dir / self._archive_filename

    def upload_dir(self, scope: UploadScope) -> Path:
        if scope == UploadScope.SHARED:
            return self.upload_shared_dir
        return self.upload_current_dir

    def download_mode_dir(self, mode: DownloadMode) -> Path:
        """``in/<mode>`` directory; not created."""
        return self.download_dir / DownloadMode(mode).value

    def download_job_dir(self, mode: DownloadMode, job_id: str, create: bool = True) -> Path:
        """``in/<mode>/<job_id>`` directory, created unless ``create`` is False."""
        path = self.download_mode_dir(mode) / job_id
        if create:
            path.mkdir(parents=True, exist_ok=True)
        return path

    # =========================================================================
    # Directory contents
    # =========================================================================
    @staticmethod
    def list_files(directory: Union[str, Path]) -> list[Path]:
        """Regular files under ``directory`` (recursive), sorted by relative path."""
        directory = Path(directory)
        if not directory.is_dir():
            return []
        return sorted(
            (p for p in directory.rglob("*") if p.is_file()),
            key=lambda p: p.relative_to(directory).as_posix(),
        )

    def has_files(self, directory: Union[str, Path]) -> bool:
        return bool(self.list_files(directory))

    # =========================================================================
    # Archives
    # =========================================================================
    def archive_dir(self, source_dir: Union[str, Path], dest_path: Union[str, Path]) -> None:
        self._archiver.archive(source_dir, dest_path)

    def extract_archive(self, source_path: Union[str, Path], dest_dir: Union[str, Path]) -> None:
        self._archiver.extract(source_path, dest_dir)

    def check_file_size(self, path: Union[str, Path]) -> None:
        """Raise ArchiveSizeExceededError when ``path`` is over the limit."""
        size = Path(path).stat().st_size
        limit = self.file_size_limit
        if size > limit:
            self._logger.warning("artifact_too_large", path=str(path), size=size, limit=limit)
            raise ArchiveSizeExceededError(
                message=f"Artifact exceeds maximum allowed size of {format_size(limit)}",
                size=size,
                limit=limit,
            )
