"""
jobartifacts.facade - Artifacts Orchestrator
==============================================

The Artifacts facade is the single entry point a job runner uses: it uploads
a run's output after the job and downloads earlier output before it.

Architecture Context:
    ┌──────────────────────────────────────────────────────┐
    │                  Artifacts (Facade)                   │
    │                                                       │
    │   upload(tags, config)          download(tags, config)│
    │        │                               │              │
    │        ▼                               ▼              │
    │   Filesystem (out/)          Query Processor          │
    │   archive / enumerate        File Resolver (fallback) │
    │        │                               │              │
    │        ▼                               ▼              │
    │   StorageTransport.upload    StorageTransport.download│
    │                              Filesystem (in/<jobId>/) │
    └──────────────────────────────────────────────────────┘

Upload:
    1. No config_id → warning, nothing uploaded.
    2. out/current → one archive (zip) or one upload per file (no zip).
    3. If the job is part of an orchestration, out/shared the same way,
       tagged ``shared`` + ``orchestrationId-<id>``.
    Transport and archiving failures abort the call as ArtifactsTransferError.

Download (first enabled mode wins: runs > custom > shared):
    runs    → this configuration's previous runs      → in/runs/<jobId>/
    custom  → another branch/component/configuration  → in/custom/<jobId>/
    shared  → the orchestration's shared artifacts    → in/shared/<jobId>/
    A file that cannot be downloaded is logged and skipped; the rest of the
    batch still proceeds.

Usage:
    >>> artifacts = Artifacts(transport)
    >>> # job writes into artifacts.filesystem.upload_current_dir ...
    >>> results = artifacts.upload(tags, ArtifactsConfig())
    >>>
    >>> config = ArtifactsConfig.from_job_configuration(job_configuration)
    >>> results = Artifacts(transport).download(tags, config)
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from jobartifacts.core.config import ArtifactsConfig, ArtifactsSettings
from jobartifacts.core.enums import DownloadMode
from jobartifacts.core.exceptions import ArtifactsTransferError, TagIntegrityError
from jobartifacts.core.models import Result, StorageFile, Tags
from jobartifacts.infrastructure.archiver import ArchiveProcessError, Archiver
from jobartifacts.infrastructure.filesystem import Filesystem
from jobartifacts.infrastructure.storage import StorageClientError, StorageTransport
from jobartifacts.services.file_resolver import get_job_id_from_file_tags, list_files
from jobartifacts.tags.processors import TagsToQueryProcessor, create_query_processor


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()


class Artifacts:
    """Uploads and downloads job artifacts.

    One instance owns one temporary workspace; create a new instance per
    logical unit of work. Calls are synchronous and transfers run one after
    another.

    Attributes:
        _transport: Storage transport bound to the job's current branch.
        _settings: Deployment settings (size ceiling, listing limits).
        _filesystem: Workspace layout under the temporary root.
    """

    def __init__(
        self,
        transport: StorageTransport,
        *,
        archiver: Optional[Archiver] = None,
        settings: Optional[ArtifactsSettings] = None,
        temp_dir: Optional[Union[str, Path]] = None,
        log: Optional[Any] = None,
    ) -> None:
        """Initialize the facade and create the workspace tree.

        Args:
            transport: Transport for the job's current branch.
            archiver: Archive implementation (tar.gz by default).
            settings: Deployment settings (defaults + environment if None).
            temp_dir: Workspace root. A fresh temporary directory is created
                when None, so concurrent instances never share a workspace.
            log: structlog logger to use instead of the module logger.
        """
        self._transport = transport
        self._settings = settings or ArtifactsSettings()

        if temp_dir is None:
            temp_dir = tempfile.mkdtemp(prefix=self._settings.temp_dir_prefix)

        self._filesystem = Filesystem(
            temp_dir,
            archiver=archiver,
            file_size_limit=self._settings.file_size_limit,
            archive_filename=self._settings.archive_filename,
        )
        self._logger = (log or logger).bind(component="artifacts")

    # =========================================================================
    # Properties
    # =========================================================================
    @property
    def filesystem(self) -> Filesystem:
        """Workspace layout; the job writes to out/ and reads from in/."""
        return self._filesystem

    @property
    def transport(self) -> StorageTransport:
        return self._transport

    # =========================================================================
    # Upload
    # =========================================================================
    def upload(self, tags: Tags, config: Optional[ArtifactsConfig] = None) -> list[Result]:
        """Upload the current (and, within an orchestration, shared) output.

        Args:
            tags: Identity of the finished job.
            config: Job artifacts configuration (defaults if None).

        Returns:
            Results of the current upload followed by the shared upload.
            Empty when config_id is missing or nothing was staged.

        Raises:
            ArtifactsTransferError: Transport or archiving failure.
            ArchiveSizeExceededError: Archive over the size ceiling.
        """
        config = config or ArtifactsConfig()

        if not tags.config_id:
            self._logger.warning(
                "artifacts_upload_skipped",
                reason="configId is not set",
                component_id=tags.component_id,
                job_id=tags.job_id,
            )
            return []

        is_zip = config.options.zip
        results = self._upload_dir(self._filesystem.upload_current_dir, tags, is_zip)

        if tags.orchestration_id:
            results += self._upload_dir(
                self._filesystem.upload_shared_dir,
                tags.with_shared(True),
                is_zip,
            )

        return results

    def _upload_dir(self, directory: Path, tags: Tags, is_zip: bool) -> list[Result]:
        files = self._filesystem.list_files(directory)
        if not files:
            self._logger.debug("artifacts_directory_empty", directory=str(directory))
            return []

        try:
            if is_zip:
                archive_path = self._filesystem.archive_path
                self._filesystem.archive_dir(directory, archive_path)
                self._filesystem.check_file_size(archive_path)
                return [self._upload_file(archive_path, tags)]

            return [self._upload_file(path, tags) for path in files]
        except (StorageClientError, ArchiveProcessError) as exc:
            raise ArtifactsTransferError(
                message=f"Error uploading file: {exc}",
                details={"directory": str(directory), "is_shared": tags.is_shared},
            ) from exc

    def _upload_file(self, path: Path, tags: Tags) -> Result:
        file_id = self._transport.upload_file(path, tags.to_upload_tags())
        self._logger.info(
            "artifact_uploaded",
            job_id=tags.job_id,
            file_id=file_id,
            file_name=path.name,
            is_shared=tags.is_shared,
        )
        return Result(storage_file_id=file_id, is_shared=tags.is_shared)

    # =========================================================================
    # Download
    # =========================================================================
    def download(self, tags: Tags, config: Optional[ArtifactsConfig] = None) -> list[Result]:
        """Download artifacts for the first enabled mode (runs > custom > shared).

        Args:
            tags: Identity of the job that is about to run.
            config: Job artifacts configuration (defaults if None).

        Returns:
            One Result per downloaded file, in listing order. Files with
            broken tags or failed transfers are skipped.

        Raises:
            DateParseError: ``date_since`` cannot be parsed.
            StorageClientError: The listing itself failed.
        """
        config = config or ArtifactsConfig()
        mode = config.download_mode()
        is_zip = config.options.zip

        if mode == DownloadMode.RUNS:
            if not tags.config_id:
                self._warn_missing_config_id(mode, tags)
                return []
            return self._download_files(
                mode,
                tags,
                self._clamp_limit(config.runs.filter.limit),
                create_query_processor(mode, config.runs.filter.date_since),
                is_zip,
            )

        if mode == DownloadMode.CUSTOM:
            custom_filter = config.custom.filter
            custom_tags = tags.merge_with_filter(custom_filter)
            if not custom_tags.config_id:
                self._warn_missing_config_id(mode, custom_tags)
                return []
            return self._download_files(
                mode,
                custom_tags,
                self._clamp_limit(custom_filter.limit),
                create_query_processor(mode, custom_filter.date_since),
                is_zip,
            )

        if mode == DownloadMode.SHARED:
            # Standalone runs have no orchestration; nothing to share
            if not tags.orchestration_id:
                return []
            return self._download_files(
                mode,
                tags,
                None,
                create_query_processor(mode),
                is_zip,
                is_shared=True,
            )

        return []

    def _download_files(
        self,
        mode: DownloadMode,
        tags: Tags,
        limit: Optional[int],
        query_processor: TagsToQueryProcessor,
        is_zip: bool,
        is_shared: bool = False,
    ) -> list[Result]:
        files = list_files(self._transport, tags, limit, query_processor)

        results: list[Result] = []
        for file in files:
            try:
                job_id = get_job_id_from_file_tags(file)
                self._download_file(file, mode, job_id, is_zip)
            except (TagIntegrityError, ArtifactsTransferError) as exc:
                self._logger.warning(
                    "artifact_download_skipped",
                    mode=mode.value,
                    file_id=file.id,
                    error=exc.message,
                    error_code=exc.error_code,
                )
                continue

            results.append(Result(storage_file_id=file.id, is_shared=is_shared))

        return results

    def _download_file(self, file: StorageFile, mode: DownloadMode, job_id: str, is_zip: bool) -> None:
        transport = self._transport_for(file.source_branch_id)
        job_dir = self._filesystem.download_job_dir(mode, job_id, create=False)
        try:
            job_dir.mkdir(parents=True, exist_ok=True)
            if is_zip:
                archive_path = self._filesystem.archive_path
                transport.download_file(file.id, archive_path)
                self._filesystem.extract_archive(archive_path, job_dir)
                archive_path.unlink(missing_ok=True)
            else:
                target = job_dir / Path(file.name).name
                if target.exists():
                    self._logger.warning(
                        "artifact_download_overwrite",
                        file_id=file.id,
                        target=str(target),
                    )
                transport.download_file(file.id, target)
        except (StorageClientError, ArchiveProcessError, OSError) as exc:
            raise ArtifactsTransferError(
                message=f"Error downloading file: {exc}",
                file_id=file.id,
            ) from exc

        self._logger.info(
            "artifact_downloaded",
            file_id=file.id,
            source_branch_id=file.source_branch_id,
            target=str(job_dir),
        )

    # =========================================================================
    # Helpers
    # =========================================================================
    def _transport_for(self, branch_id: str) -> StorageTransport:
        if branch_id == self._transport.current_branch_id():
            return self._transport
        return self._transport.for_branch(branch_id)

    def _clamp_limit(self, limit: Optional[int]) -> int:
        maximum = self._settings.max_download_limit
        if limit is None or limit > maximum:
            return maximum
        return limit

    def _warn_missing_config_id(self, mode: DownloadMode, tags: Tags) -> None:
        self._logger.warning(
            "artifacts_download_skipped",
            mode=mode.value,
            reason="configId is not set",
            component_id=tags.component_id,
            job_id=tags.job_id,
        )
