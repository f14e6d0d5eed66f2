"""
Tests for jobartifacts.core.exceptions
=========================================

What's Being Tested:
    - Base class fields, to_dict() and __repr__
    - Default error codes of every subclass
    - Context values copied into ``details``
"""

from __future__ import annotations

import pytest

from jobartifacts.core.exceptions import (
    ArchiveSizeExceededError,
    ArtifactsError,
    ArtifactsTransferError,
    ConfigurationError,
    DateParseError,
    TagIntegrityError,
)


class TestArtifactsError:
    """Tests for the base exception."""

    def test_fields(self) -> None:
        error = ArtifactsError("boom", details={"a": 1})
        assert str(error) == "boom"
        assert error.message == "boom"
        assert error.error_code == "ARTIFACTS_ERROR"
        assert error.details == {"a": 1}

    def test_to_dict(self) -> None:
        error = ConfigurationError("bad config")
        assert error.to_dict() == {
            "error_type": "ConfigurationError",
            "message": "bad config",
            "error_code": "CONFIG_ERROR",
            "details": {},
        }

    def test_repr(self) -> None:
        assert repr(ArtifactsError("x")) == (
            "ArtifactsError(message='x', error_code='ARTIFACTS_ERROR', details={})"
        )


class TestSubclasses:
    """Error codes and enriched details of the concrete errors."""

    @pytest.mark.parametrize(
        "error, code",
        [
            (ConfigurationError("m"), "CONFIG_ERROR"),
            (ArtifactsTransferError("m"), "TRANSFER_FAILED"),
            (ArchiveSizeExceededError("m", size=10, limit=5), "ARCHIVE_TOO_LARGE"),
            (TagIntegrityError("m", file_id=3), "TAG_INTEGRITY"),
            (DateParseError("m", value="nope"), "INVALID_DATE"),
        ],
    )
    def test_error_codes(self, error, code) -> None:
        assert isinstance(error, ArtifactsError)
        assert error.error_code == code

    def test_transfer_error_file_id(self) -> None:
        error = ArtifactsTransferError("m", file_id=12)
        assert error.file_id == 12
        assert error.details == {"file_id": 12}

    def test_transfer_error_without_file_id(self) -> None:
        error = ArtifactsTransferError("m", details={"path": "/x"})
        assert error.file_id is None
        assert error.details == {"path": "/x"}

    def test_size_error_details(self) -> None:
        error = ArchiveSizeExceededError("m", size=10, limit=5)
        assert (error.size, error.limit) == (10, 5)
        assert error.details == {"size": 10, "limit": 5}

    def test_date_error_value(self) -> None:
        error = DateParseError("m", value="nope")
        assert error.value == "nope"
        assert error.details["value"] == "nope"
