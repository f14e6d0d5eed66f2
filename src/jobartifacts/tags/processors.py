"""
jobartifacts.tags.processors - Tags → Storage Query
=====================================================

Query processors turn a Tags instance into a storage search query. The set
is closed: one processor per way of looking artifacts up.

    RunsQueryProcessor   → this configuration's own, non-shared artifacts
                           (used by the RUNS and CUSTOM download modes)
    SharedQueryProcessor → the orchestration-wide shared pool

Query Grammar (order of predicates is part of the contract with the
search backend and must not change):

    tags:(artifact AND branchId-<b> AND componentId-<c> AND configId-<cfg> NOT shared)
        [ AND created:>YYYY-MM-DD]
    tags:(artifact AND shared AND branchId-<b> AND orchestrationId-<o>)

Shared queries intentionally ignore component and configuration: every
component of one orchestration reads the same shared pool.

Usage:
    >>> processor = create_query_processor(DownloadMode.RUNS, date_since="-7 days")
    >>> processor.to_query(tags)
    'tags:(artifact AND branchId-1 AND componentId-c AND configId-5 NOT shared) AND created:>2023-08-11'
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

import dateparser

from jobartifacts.core.enums import DownloadMode
from jobartifacts.core.exceptions import DateParseError
from jobartifacts.core.models import (
    ARTIFACT_TAG,
    BRANCH_ID_PREFIX,
    COMPONENT_ID_PREFIX,
    CONFIG_ID_PREFIX,
    ORCHESTRATION_ID_PREFIX,
    SHARED_TAG,
    Tags,
)


# "-7 days", "+ 2 weeks": signed offsets that dateparser spells differently
_SIGNED_OFFSET = re.compile(r"^\s*([+-])\s*(\d+)\s*([a-zA-Z]+)\s*$")


# =============================================================================
# Abstract Base Class
# =============================================================================
class TagsToQueryProcessor(ABC):
    """Builds a storage search query from Tags."""

    @abstractmethod
    def to_query(self, tags: Tags) -> str:
        """Return the search query for the given tags."""
        ...


# =============================================================================
# Runs Processor
# =============================================================================
class RunsQueryProcessor(TagsToQueryProcessor):
    """Query for previous, non-shared runs of one configuration.

    Attributes:
        date_since: Optional lower bound on file creation. Absolute dates
            ("2023-08-18") and relative expressions ("-7 days", "yesterday",
            "3 weeks ago") are accepted.
        relative_base: Reference time for relative expressions. Defaults to
            the current time at query build.
    """

    def __init__(
        self,
        date_since: Optional[str] = None,
        relative_base: Optional[datetime] = None,
    ) -> None:
        self.date_since = date_since
        self.relative_base = relative_base

    def to_query(self, tags: Tags) -> str:
        query = (
            f"tags:({ARTIFACT_TAG} "
            f"AND {BRANCH_ID_PREFIX}{tags.branch_id} "
            f"AND {COMPONENT_ID_PREFIX}{tags.component_id} "
            f"AND {CONFIG_ID_PREFIX}{tags.config_id or ''} "
            f"NOT {SHARED_TAG})"
        )

        if self.date_since:
            query += " AND created:>" + normalize_date(self.date_since, self.relative_base)

        return query


# =============================================================================
# Shared Processor
# =============================================================================
class SharedQueryProcessor(TagsToQueryProcessor):
    """Query for the shared artifacts of one orchestration."""

    def to_query(self, tags: Tags) -> str:
        return (
            f"tags:({ARTIFACT_TAG} "
            f"AND {SHARED_TAG} "
            f"AND {BRANCH_ID_PREFIX}{tags.branch_id} "
            f"AND {ORCHESTRATION_ID_PREFIX}{tags.orchestration_id or ''})"
        )


# =============================================================================
# Factory
# =============================================================================
def create_query_processor(
    mode: DownloadMode,
    date_since: Optional[str] = None,
) -> TagsToQueryProcessor:
    """Create the query processor for a download mode.

    RUNS and CUSTOM both look up non-shared runs (CUSTOM only changes the
    identity in the tags); SHARED reads the orchestration pool and ignores
    ``date_since``.

    Raises:
        ValueError: If the mode is not a known DownloadMode.
    """
    if mode in (DownloadMode.RUNS, DownloadMode.CUSTOM):
        return RunsQueryProcessor(date_since)
    if mode == DownloadMode.SHARED:
        return SharedQueryProcessor()

    raise ValueError(f"Unknown download mode: '{mode}'")


# =============================================================================
# Date Normalisation
# =============================================================================
def normalize_date(value: str, relative_base: Optional[datetime] = None) -> str:
    """Normalise an absolute or relative date expression to ``YYYY-MM-DD`` (UTC).

    Raises:
        DateParseError: If the expression cannot be parsed.
    """
    expression = value
    match = _SIGNED_OFFSET.match(value)
    if match:
        sign, amount, unit = match.groups()
        expression = f"{amount} {unit} ago" if sign == "-" else f"in {amount} {unit}"

    settings = {"TIMEZONE": "UTC", "TO_TIMEZONE": "UTC"}
    if relative_base is not None:
        if relative_base.tzinfo is not None:
            relative_base = relative_base.astimezone(timezone.utc).replace(tzinfo=None)
        settings["RELATIVE_BASE"] = relative_base

    parsed = dateparser.parse(expression, languages=["en"], settings=settings)
    if parsed is None:
        raise DateParseError(
            message=f'Unable to parse date "{value}"',
            value=value,
        )

    return parsed.strftime("%Y-%m-%d")
