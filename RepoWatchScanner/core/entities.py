"""
Core domain entities for RepoWatchScanner.
These represent the business objects in our system.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class OwnerKind(str, Enum):
    """Kind of account that owns the repositories being scanned."""

    USER = "user"
    ORGANIZATION = "organization"

    @classmethod
    def parse(cls, value: str) -> "OwnerKind":
        """
        Parse a user-supplied owner kind.

        Accepts "user", "org" and "organization" in any case.
        """
        normalized = (value or "").strip().lower()
        if normalized == "org":
            normalized = cls.ORGANIZATION.value
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(
                f"owner kind must be 'user' or 'organization', got {value!r}"
            ) from None


class StopReason(str, Enum):
    """
    State of a scan. A scan starts in SCANNING and ends in exactly one
    of the other states.
    """

    SCANNING = "scanning"
    LIMIT = "limit"
    CUTOFF = "cutoff"
    EXHAUSTED = "exhausted"
    ABORTED = "aborted"


@dataclass
class RepositorySummary:
    """
    Repository as returned by the listing endpoint.
    Only the fields the scanner needs are kept.
    """
    full_name: str
    created_at: datetime
    archived: bool = False

    def __post_init__(self):
        """Validate repository data."""
        if not isinstance(self.created_at, datetime):
            raise ValueError("created_at must be a datetime")
        if self.created_at.tzinfo is None:
            raise ValueError("created_at must be timezone-aware")
        if self.full_name is None:
            self.full_name = ""


@dataclass
class ScanOptions:
    """
    Parameters of one scan.
    """
    owner: str
    cutoff: datetime
    limit: int
    owner_kind: Optional[OwnerKind] = None
    include_archived: bool = False
    dry_run: bool = False

    def __post_init__(self):
        """Validate scan parameters."""
        if not self.owner or not self.owner.strip():
            raise ValueError("owner is required")
        if self.limit < 1:
            raise ValueError("limit must be positive")
        if self.cutoff.tzinfo is None:
            raise ValueError("cutoff must be timezone-aware")

    @property
    def page_size(self) -> int:
        return min(100, self.limit)


@dataclass
class ScanResult:
    """
    Tally of a scan. Mutated only by the scanner while it runs.
    """
    processed: int = 0
    watched: int = 0
    skipped: int = 0
    failed: int = 0
    would_watch: int = 0
    stop_reason: StopReason = StopReason.SCANNING
    failures: list[tuple[str, str]] = field(default_factory=list)

    @property
    def classified(self) -> int:
        return self.watched + self.skipped + self.failed + self.would_watch

    @property
    def unclassified(self) -> int:
        """
        Items counted as processed but not classified.
        Non-zero only for the item that triggered a cutoff stop.
        """
        return self.processed - self.classified

    @property
    def ok(self) -> bool:
        return self.failed == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def summary(self) -> str:
        """One-line summary of the counts."""
        return (
            f"processed={self.processed} watched={self.watched} "
            f"skipped={self.skipped} failed={self.failed} "
            f"would_watch={self.would_watch} stop={self.stop_reason.value}"
        )
