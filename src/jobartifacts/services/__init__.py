"""
jobartifacts.services - Artifact Resolution Services
======================================================

Components:
    - list_files:                 query + branch fallback → StorageFile list
    - get_job_id_from_file_tags:  job id a listed file belongs to
"""

from jobartifacts.services.file_resolver import (
    DEFAULT_LIST_LIMIT,
    get_job_id_from_file_tags,
    list_files,
)

__all__ = [
    "DEFAULT_LIST_LIMIT",
    "get_job_id_from_file_tags",
    "list_files",
]
