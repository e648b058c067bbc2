"""
Rate limit tracking for the GitHub REST API.
Listing and write calls share one budget, so every response is observed here.
"""

import logging
from datetime import datetime, timezone
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """Raised when the GitHub API returns a non-success response."""
    def __init__(self, status_code: int, message: str, url: str = ""):
        self.status_code = status_code
        self.message = message
        self.url = url
        super().__init__(f"HTTP {status_code} for {url}: {message}")


class RateLimitExceeded(GitHubAPIError):
    """Raised when GitHub API rate limit is exceeded."""
    def __init__(self, reset_at: datetime, url: str = "", status_code: int = 403):
        self.reset_at = reset_at
        super().__init__(status_code, f"Rate limit exceeded. Resets at {reset_at}", url)


def parse_reset(value: Optional[str]) -> Optional[datetime]:
    """Convert an X-RateLimit-Reset epoch header to an aware datetime."""
    if not value:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError):
        return None


class RateLimitMonitor:
    """
    Tracks the remaining request budget reported by GitHub.
    Warns when the budget runs low; it never waits or retries.
    """

    def __init__(self, low_threshold: int = 100):
        """
        Args:
            low_threshold: Remaining-request count under which a warning is logged
        """
        self.low_threshold = low_threshold
        self.requests_made = 0
        self.remaining: int | None = None
        self.reset_at: datetime | None = None

    def update_from_headers(self, headers: Mapping[str, str]):
        """
        Update monitor state from API response headers.

        Args:
            headers: Response headers of the last request
        """
        self.requests_made += 1

        remaining = headers.get("X-RateLimit-Remaining")
        if remaining is None:
            return
        try:
            self.remaining = int(remaining)
        except ValueError:
            return
        self.reset_at = parse_reset(headers.get("X-RateLimit-Reset"))

        if self.remaining < self.low_threshold:
            logger.warning(
                f"Approaching rate limit ({self.remaining} remaining, "
                f"resets at {self.reset_at})"
            )

    def is_exhausted(self, status_code: int, headers: Mapping[str, str]) -> bool:
        """Check whether a response was rejected because the budget ran out."""
        if status_code not in (403, 429):
            return False
        if status_code == 429:
            return True
        return headers.get("X-RateLimit-Remaining") == "0"
