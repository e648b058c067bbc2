"""
Tests for the core domain entities.
"""

import pytest
from datetime import datetime, timezone

from core.entities import OwnerKind, RepositorySummary, ScanOptions, ScanResult, StopReason


NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


class TestRepositorySummary:
    """Test RepositorySummary entity."""

    def test_valid_repository(self):
        """Test creating a valid repository summary."""
        repo = RepositorySummary(full_name="acme/widget", created_at=NOW, archived=True)

        assert repo.full_name == "acme/widget"
        assert repo.created_at == NOW
        assert repo.archived is True

    def test_archived_defaults_to_false(self):
        """Test archived defaults to False."""
        repo = RepositorySummary(full_name="acme/widget", created_at=NOW)
        assert repo.archived is False

    def test_missing_name_becomes_empty(self):
        """A missing name is kept so the scanner can skip it."""
        repo = RepositorySummary(full_name=None, created_at=NOW)
        assert repo.full_name == ""

    def test_naive_created_at(self):
        """Test that naive timestamps are rejected."""
        with pytest.raises(ValueError, match="timezone-aware"):
            RepositorySummary(full_name="acme/widget", created_at=datetime(2024, 6, 1))

    def test_created_at_must_be_datetime(self):
        """Test that a string created_at is rejected."""
        with pytest.raises(ValueError, match="must be a datetime"):
            RepositorySummary(full_name="acme/widget", created_at="2024-06-01")


class TestOwnerKind:
    """Test OwnerKind parsing."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("user", OwnerKind.USER),
            ("User", OwnerKind.USER),
            ("org", OwnerKind.ORGANIZATION),
            ("ORGANIZATION", OwnerKind.ORGANIZATION),
            (" organization ", OwnerKind.ORGANIZATION),
        ],
    )
    def test_parse(self, value, expected):
        """Test accepted owner kind spellings."""
        assert OwnerKind.parse(value) is expected

    def test_parse_invalid(self):
        """Test unknown owner kinds are rejected."""
        with pytest.raises(ValueError, match="owner kind"):
            OwnerKind.parse("team")


class TestScanOptions:
    """Test ScanOptions validation."""

    def test_page_size_is_capped(self):
        """Test page size is the limit capped at 100."""
        assert ScanOptions(owner="acme", cutoff=NOW, limit=5).page_size == 5
        assert ScanOptions(owner="acme", cutoff=NOW, limit=100).page_size == 100
        assert ScanOptions(owner="acme", cutoff=NOW, limit=250).page_size == 100

    def test_empty_owner(self):
        """Test that a blank owner is rejected."""
        with pytest.raises(ValueError, match="owner is required"):
            ScanOptions(owner="  ", cutoff=NOW, limit=10)

    def test_limit_must_be_positive(self):
        """Test that a zero limit is rejected."""
        with pytest.raises(ValueError, match="limit must be positive"):
            ScanOptions(owner="acme", cutoff=NOW, limit=0)

    def test_naive_cutoff(self):
        """Test that a naive cutoff is rejected."""
        with pytest.raises(ValueError, match="cutoff must be timezone-aware"):
            ScanOptions(owner="acme", cutoff=datetime(2024, 6, 1), limit=10)


class TestScanResult:
    """Test ScanResult accounting."""

    def test_defaults(self):
        """Test a fresh result is empty and successful."""
        result = ScanResult()

        assert result.stop_reason is StopReason.SCANNING
        assert result.ok is True
        assert result.exit_code == 0
        assert result.unclassified == 0

    def test_failure_sets_exit_code(self):
        """Test any failure makes the exit code 1."""
        result = ScanResult(processed=3, watched=2, failed=1)

        assert result.ok is False
        assert result.exit_code == 1

    def test_unclassified_boundary_item(self):
        """Test the cutoff item shows up as unclassified."""
        result = ScanResult(processed=3, watched=2, stop_reason=StopReason.CUTOFF)
        assert result.unclassified == 1

    def test_summary(self):
        """Test the one-line summary format."""
        result = ScanResult(
            processed=4, watched=1, skipped=1, failed=1, would_watch=0,
            stop_reason=StopReason.EXHAUSTED,
        )
        assert result.summary() == (
            "processed=4 watched=1 skipped=1 failed=1 would_watch=0 stop=exhausted"
        )
