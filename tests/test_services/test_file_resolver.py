"""
Tests for jobartifacts.services.file_resolver
================================================

What's Being Tested:
    - Branch fallback matrix (dev/default branch × per-branch storage ×
      files present on which branch)
    - source_branch_id stamping and default limit
    - Job id extraction from file tags

Branch "12345" is the default branch and "54321" a development branch.
"""

from __future__ import annotations

import pytest

from jobartifacts.core.exceptions import TagIntegrityError
from jobartifacts.core.models import StorageFile, Tags
from jobartifacts.infrastructure.storage import InMemoryStorageBackend
from jobartifacts.services.file_resolver import (
    DEFAULT_LIST_LIMIT,
    get_job_id_from_file_tags,
    list_files,
)
from jobartifacts.tags.processors import RunsQueryProcessor, SharedQueryProcessor


DEFAULT_BRANCH = "12345"
DEV_BRANCH = "54321"


def _tags(branch_id: str, **overrides) -> Tags:
    defaults = {
        "branch_id": branch_id,
        "component_id": "keboola.component",
        "config_id": "123",
        "job_id": "1001",
    }
    defaults.update(overrides)
    return Tags(**defaults)


def _seed(backend: InMemoryStorageBackend, branch_id: str, job_id: str = "900") -> int:
    """Store a runs artifact tagged for ``branch_id`` in that branch's storage."""
    tags = _tags(branch_id, job_id=job_id).to_upload_tags()
    return backend.add_file("artifacts.tar.gz", b"", tags, branch_id=branch_id)


def _file(*tags: str) -> StorageFile:
    return StorageFile(id=5, name="artifacts.tar.gz", tags=list(tags), source_branch_id="1")


# =============================================================================
# Tests: Branch Fallback
# =============================================================================
class TestBranchFallback:
    """Tests for list_files() branch resolution."""

    @pytest.mark.parametrize(
        "current, per_branch, seeded_on, expected_source",
        [
            # default branch: never falls back
            (DEFAULT_BRANCH, True, [DEFAULT_BRANCH], DEFAULT_BRANCH),
            (DEFAULT_BRANCH, False, [DEFAULT_BRANCH], DEFAULT_BRANCH),
            (DEFAULT_BRANCH, True, [], None),
            # dev branch with own files: current wins
            (DEV_BRANCH, True, [DEV_BRANCH], DEV_BRANCH),
            (DEV_BRANCH, True, [DEV_BRANCH, DEFAULT_BRANCH], DEV_BRANCH),
            (DEV_BRANCH, False, [DEV_BRANCH, DEFAULT_BRANCH], DEV_BRANCH),
            # dev branch without own files
            (DEV_BRANCH, True, [DEFAULT_BRANCH], DEFAULT_BRANCH),
            (DEV_BRANCH, False, [DEFAULT_BRANCH], None),
            (DEV_BRANCH, True, [], None),
        ],
    )
    def test_matrix(self, current, per_branch, seeded_on, expected_source) -> None:
        backend = InMemoryStorageBackend(default_branch_id=DEFAULT_BRANCH, use_branch_storage=per_branch)
        for branch_id in seeded_on:
            _seed(backend, branch_id)

        files = list_files(backend.transport(current), _tags(current), 10, RunsQueryProcessor())

        if expected_source is None:
            assert files == []
        else:
            assert len(files) == 1
            assert files[0].source_branch_id == expected_source

    def test_fallback_queries_default_branch_tags(self) -> None:
        backend = InMemoryStorageBackend(default_branch_id=DEFAULT_BRANCH, use_branch_storage=True)
        _seed(backend, DEFAULT_BRANCH)

        list_files(backend.transport(DEV_BRANCH), _tags(DEV_BRANCH), 10, RunsQueryProcessor())

        calls = backend.calls("list")
        assert [c["branch_id"] for c in calls] == [DEV_BRANCH, DEFAULT_BRANCH]
        assert "branchId-54321" in calls[0]["query"]
        assert calls[1]["query"] == (
            "tags:(artifact AND branchId-12345 AND componentId-keboola.component "
            "AND configId-123 NOT shared)"
        )
        assert calls[1]["limit"] == 10

    def test_shared_fallback(self) -> None:
        backend = InMemoryStorageBackend(default_branch_id=DEFAULT_BRANCH, use_branch_storage=True)
        shared_tags = _tags(DEFAULT_BRANCH, orchestration_id="777").with_shared().to_upload_tags()
        file_id = backend.add_file("s.tar.gz", b"", shared_tags, branch_id=DEFAULT_BRANCH)

        files = list_files(
            backend.transport(DEV_BRANCH),
            _tags(DEV_BRANCH, orchestration_id="777"),
            None,
            SharedQueryProcessor(),
        )
        assert [(f.id, f.source_branch_id) for f in files] == [(file_id, DEFAULT_BRANCH)]
        assert backend.calls("list")[1]["query"] == (
            "tags:(artifact AND shared AND branchId-12345 AND orchestrationId-777)"
        )

    def test_no_fallback_call_without_branch_storage(self) -> None:
        backend = InMemoryStorageBackend(default_branch_id=DEFAULT_BRANCH)
        list_files(backend.transport(DEV_BRANCH), _tags(DEV_BRANCH), 10, RunsQueryProcessor())
        assert len(backend.calls("list")) == 1

    def test_default_limit(self) -> None:
        backend = InMemoryStorageBackend(default_branch_id=DEFAULT_BRANCH)
        list_files(backend.transport(), _tags(DEFAULT_BRANCH), None, RunsQueryProcessor())
        assert backend.calls("list")[0]["limit"] == DEFAULT_LIST_LIMIT == 50

    def test_listing_order_preserved(self) -> None:
        backend = InMemoryStorageBackend(default_branch_id=DEFAULT_BRANCH)
        first = _seed(backend, DEFAULT_BRANCH, job_id="1")
        second = _seed(backend, DEFAULT_BRANCH, job_id="2")

        files = list_files(backend.transport(), _tags(DEFAULT_BRANCH), 10, RunsQueryProcessor())
        assert [f.id for f in files] == [second, first]


# =============================================================================
# Tests: Job Id Extraction
# =============================================================================
class TestGetJobIdFromFileTags:
    """Tests for get_job_id_from_file_tags()."""

    def test_single_tag(self) -> None:
        assert get_job_id_from_file_tags(_file("artifact", "jobId-42", "configId-1")) == "42"

    def test_missing_tag(self) -> None:
        with pytest.raises(TagIntegrityError) as exc_info:
            get_job_id_from_file_tags(_file("artifact", "configId-1"))
        assert exc_info.value.message == 'Missing jobId tag on artifact file "5"'
        assert exc_info.value.file_id == 5

    def test_duplicate_tags(self) -> None:
        with pytest.raises(TagIntegrityError) as exc_info:
            get_job_id_from_file_tags(_file("jobId-1", "artifact", "jobId-2"))
        assert exc_info.value.message == 'There is more than one jobId tag on artifact file "5"'
        assert exc_info.value.details["job_ids"] == ["1", "2"]

    def test_empty_value(self) -> None:
        with pytest.raises(TagIntegrityError, match="Missing jobId tag"):
            get_job_id_from_file_tags(_file("artifact", "jobId-"))

    @pytest.mark.parametrize(
        "job_id",
        ["..", ".", "../../..", "/some/dir", "nested/42", "..\\up", "a\x00b"],
    )
    def test_value_must_be_single_directory_name(self, job_id) -> None:
        """Values that would leave in/<mode>/ or break mkdir are rejected."""
        with pytest.raises(TagIntegrityError) as exc_info:
            get_job_id_from_file_tags(_file("artifact", f"jobId-{job_id}"))
        assert exc_info.value.message.startswith("Invalid jobId tag")
        assert exc_info.value.details["job_id"] == job_id

    @pytest.mark.parametrize("job_id", ["42", "job.42", "...", "123-abc_def"])
    def test_plain_values_accepted(self, job_id) -> None:
        assert get_job_id_from_file_tags(_file(f"jobId-{job_id}")) == job_id

    def test_prefix_is_case_sensitive(self) -> None:
        with pytest.raises(TagIntegrityError):
            get_job_id_from_file_tags(_file("jobid-42"))
