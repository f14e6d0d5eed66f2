"""
jobartifacts.tags - Tag Query Processors
==========================================

Components:
    - TagsToQueryProcessor (ABC): Tags → storage search query
    - RunsQueryProcessor:         previous runs of one configuration
    - SharedQueryProcessor:       orchestration-wide shared pool
    - create_query_processor:     processor for a DownloadMode
"""

from jobartifacts.tags.processors import (
    RunsQueryProcessor,
    SharedQueryProcessor,
    TagsToQueryProcessor,
    create_query_processor,
    normalize_date,
)

__all__ = [
    "RunsQueryProcessor",
    "SharedQueryProcessor",
    "TagsToQueryProcessor",
    "create_query_processor",
    "normalize_date",
]
