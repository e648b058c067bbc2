"""
Runtime settings for RepoWatchScanner, read from environment variables.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "INFO"


@dataclass
class Settings:
    """
    Settings shared by the GitHub client and the command line.
    """
    api_url: str = DEFAULT_API_URL
    token: Optional[str] = None
    request_timeout: float = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
        """
        env = os.environ if environ is None else environ

        timeout_raw = env.get("GITHUB_REQUEST_TIMEOUT", str(DEFAULT_TIMEOUT))
        try:
            timeout = float(timeout_raw)
        except ValueError:
            raise ValueError(
                f"GITHUB_REQUEST_TIMEOUT must be a number, got {timeout_raw!r}"
            ) from None
        if timeout <= 0:
            raise ValueError("GITHUB_REQUEST_TIMEOUT must be positive")

        return cls(
            api_url=env.get("GITHUB_API_URL", DEFAULT_API_URL).rstrip("/"),
            token=env.get("GITHUB_TOKEN") or env.get("GH_TOKEN") or None,
            request_timeout=timeout,
            log_level=env.get("WATCH_SCAN_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )
