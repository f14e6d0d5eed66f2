"""
jobartifacts.services.file_resolver - Artifact File Resolution
================================================================

Lists artifact files for a query and decides which branch each file must be
downloaded from.

Branch Fallback:
    1. List on the caller's current branch.
    2. Only if that returned nothing, the current branch is a development
       branch, AND the deployment uses real per-branch storage: list again on
       the default branch, with the tags re-pointed at the default branch.

    With real per-branch storage, artifacts produced on the default branch
    stay visible to a feature branch that has none of its own yet, while a
    feature branch's artifacts never show up on the default branch. When
    branches are only emulated through tags, the branchId tag already scopes
    the query and no fallback happens.

    Every returned file is stamped with the branch whose transport listed it;
    downloads must go through that same branch's transport. When both tiers
    could match, the current branch wins because the fallback only runs
    after an empty listing.

Usage:
    >>> files = list_files(transport, tags, 50, SharedQueryProcessor())
    >>> job_id = get_job_id_from_file_tags(files[0])
"""

from __future__ import annotations

import re
from typing import Optional

import structlog

from jobartifacts.core.exceptions import TagIntegrityError
from jobartifacts.core.models import JOB_ID_PREFIX, FileMetadata, StorageFile, Tags
from jobartifacts.infrastructure.storage import StorageTransport
from jobartifacts.tags.processors import TagsToQueryProcessor


logger = structlog.get_logger()

DEFAULT_LIST_LIMIT = 50

# One path segment: no separators, no NUL
_SAFE_JOB_ID = re.compile(r"[^/\\\x00]+")


def list_files(
    transport: StorageTransport,
    tags: Tags,
    limit: Optional[int],
    query_processor: TagsToQueryProcessor,
) -> list[StorageFile]:
    """List artifact files matching ``tags``, resolving their source branch.

    Args:
        transport: Transport bound to the caller's current branch.
        tags: Identity to search for.
        limit: Maximum number of files (None → DEFAULT_LIST_LIMIT).
        query_processor: Strategy building the search query.

    Returns:
        Files in listing order, each with ``source_branch_id`` set.

    Raises:
        StorageClientError: Transport failures are not handled here.
        DateParseError: If the processor cannot build the query.
    """
    if limit is None:
        limit = DEFAULT_LIST_LIMIT

    query = query_processor.to_query(tags)
    current_branch_id = transport.current_branch_id()
    files = transport.list_files(query, limit)

    logger.debug(
        "artifact_files_listed",
        query=query,
        limit=limit,
        branch_id=current_branch_id,
        count=len(files),
    )

    if files:
        return _to_storage_files(files, current_branch_id)

    if not (transport.is_development_branch() and transport.uses_per_branch_storage()):
        return []

    default_branch_id = transport.default_branch_id()
    default_query = query_processor.to_query(tags.with_branch(default_branch_id))
    files = transport.for_branch(default_branch_id).list_files(default_query, limit)

    logger.debug(
        "artifact_files_fallback",
        query=default_query,
        limit=limit,
        branch_id=default_branch_id,
        count=len(files),
    )

    return _to_storage_files(files, default_branch_id)


def get_job_id_from_file_tags(file: StorageFile) -> str:
    """Return the job id encoded in the file's ``jobId-<id>`` tag.

    Raises:
        TagIntegrityError: If the file has no jobId tag, more than one, or
            one whose value is not a single directory name.
    """
    job_ids = [tag[len(JOB_ID_PREFIX):] for tag in file.tags if tag.startswith(JOB_ID_PREFIX)]

    if not job_ids:
        raise TagIntegrityError(
            message=f'Missing jobId tag on artifact file "{file.id}"',
            file_id=file.id,
        )

    if len(job_ids) > 1:
        raise TagIntegrityError(
            message=f'There is more than one jobId tag on artifact file "{file.id}"',
            file_id=file.id,
            details={"job_ids": job_ids},
        )

    # "jobId-" with no value cannot name a target directory
    if not job_ids[0]:
        raise TagIntegrityError(
            message=f'Missing jobId tag on artifact file "{file.id}"',
            file_id=file.id,
        )

    # The value becomes one directory name under in/<mode>/
    if job_ids[0] in (".", "..") or not _SAFE_JOB_ID.fullmatch(job_ids[0]):
        raise TagIntegrityError(
            message=f'Invalid jobId tag "{job_ids[0]}" on artifact file "{file.id}"',
            file_id=file.id,
            details={"job_id": job_ids[0]},
        )

    return job_ids[0]


def _to_storage_files(files: list[FileMetadata], source_branch_id: str) -> list[StorageFile]:
    seen: set = set()
    result = []
    for metadata in files:
        if metadata.id in seen:
            continue
        seen.add(metadata.id)
        result.append(StorageFile.from_metadata(metadata, source_branch_id))
    return result
