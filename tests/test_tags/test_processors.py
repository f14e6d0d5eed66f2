"""
Tests for jobartifacts.tags.processors
=========================================

What's Being Tested:
    - Exact query strings of the runs and shared processors
    - created:> bound from absolute and relative date expressions
    - Factory mapping from download mode to processor
    - Date parse failures
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from jobartifacts.core.enums import DownloadMode
from jobartifacts.core.exceptions import DateParseError
from jobartifacts.core.models import Tags
from jobartifacts.tags.processors import (
    RunsQueryProcessor,
    SharedQueryProcessor,
    TagsToQueryProcessor,
    create_query_processor,
    normalize_date,
)


BASE = datetime(2023, 8, 18, 12, 0, 0)


def _tags(**overrides) -> Tags:
    defaults = {
        "branch_id": "12345",
        "component_id": "keboola.component",
        "config_id": "123",
        "job_id": "1001",
        "orchestration_id": "",
    }
    defaults.update(overrides)
    return Tags(**defaults)


# =============================================================================
# Tests: Runs Processor
# =============================================================================
class TestRunsQueryProcessor:
    """Queries for this configuration's previous runs."""

    def test_query_without_date(self) -> None:
        assert RunsQueryProcessor().to_query(_tags()) == (
            "tags:(artifact AND branchId-12345 AND componentId-keboola.component "
            "AND configId-123 NOT shared)"
        )

    def test_query_with_absolute_date(self) -> None:
        query = RunsQueryProcessor(date_since="2021-01-01").to_query(_tags())
        assert query == (
            "tags:(artifact AND branchId-12345 AND componentId-keboola.component "
            "AND configId-123 NOT shared) AND created:>2021-01-01"
        )

    def test_query_with_relative_date(self) -> None:
        processor = RunsQueryProcessor(date_since="-7 days", relative_base=BASE)
        assert processor.to_query(_tags()).endswith(" AND created:>2023-08-11")

    def test_empty_date_is_ignored(self) -> None:
        assert "created" not in RunsQueryProcessor(date_since="").to_query(_tags())

    def test_invalid_date_raises(self) -> None:
        with pytest.raises(DateParseError) as exc_info:
            RunsQueryProcessor(date_since="qwertyuiop zxcvb").to_query(_tags())
        assert exc_info.value.value == "qwertyuiop zxcvb"
        assert exc_info.value.message == 'Unable to parse date "qwertyuiop zxcvb"'


# =============================================================================
# Tests: Shared Processor
# =============================================================================
class TestSharedQueryProcessor:
    """Queries for an orchestration's shared pool."""

    def test_query(self) -> None:
        assert SharedQueryProcessor().to_query(_tags(orchestration_id="777")) == (
            "tags:(artifact AND shared AND branchId-12345 AND orchestrationId-777)"
        )

    def test_query_ignores_component_and_config(self) -> None:
        """Every component of the orchestration reads the same pool."""
        a = SharedQueryProcessor().to_query(_tags(orchestration_id="777"))
        b = SharedQueryProcessor().to_query(
            _tags(orchestration_id="777", component_id="keboola.other", config_id="9"),
        )
        assert a == b

    def test_query_with_empty_orchestration(self) -> None:
        assert SharedQueryProcessor().to_query(_tags()) == (
            "tags:(artifact AND shared AND branchId-12345 AND orchestrationId-)"
        )


# =============================================================================
# Tests: Factory
# =============================================================================
class TestCreateQueryProcessor:
    """Tests for create_query_processor()."""

    @pytest.mark.parametrize("mode", [DownloadMode.RUNS, DownloadMode.CUSTOM])
    def test_runs_and_custom(self, mode) -> None:
        processor = create_query_processor(mode, date_since="2023-01-01")
        assert isinstance(processor, RunsQueryProcessor)
        assert processor.date_since == "2023-01-01"

    def test_shared(self) -> None:
        processor = create_query_processor(DownloadMode.SHARED, date_since="2023-01-01")
        assert isinstance(processor, SharedQueryProcessor)
        assert isinstance(processor, TagsToQueryProcessor)

    def test_accepts_plain_string(self) -> None:
        assert isinstance(create_query_processor("runs"), RunsQueryProcessor)

    def test_unknown_mode(self) -> None:
        with pytest.raises(ValueError, match="Unknown download mode"):
            create_query_processor("everything")


# =============================================================================
# Tests: Date Normalisation
# =============================================================================
class TestNormalizeDate:
    """Tests for normalize_date()."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2023-08-18", "2023-08-18"),
            ("2021-01-01", "2021-01-01"),
            ("-7 days", "2023-08-11"),
            ("- 2 weeks", "2023-08-04"),
            ("+2 days", "2023-08-20"),
            ("yesterday", "2023-08-17"),
            ("3 days ago", "2023-08-15"),
        ],
    )
    def test_expressions(self, value, expected) -> None:
        assert normalize_date(value, relative_base=BASE) == expected

    def test_aware_relative_base(self) -> None:
        """Aware reference times are converted to UTC first."""
        base = datetime(2023, 8, 18, 23, 30, tzinfo=timezone(timedelta(hours=-2)))
        assert normalize_date("-2 days", relative_base=base) == "2023-08-17"

    def test_unparseable(self) -> None:
        with pytest.raises(DateParseError):
            normalize_date("qwertyuiop zxcvb", relative_base=BASE)
