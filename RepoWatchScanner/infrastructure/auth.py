"""
Token bootstrapping for the GitHub API.
"""

import logging
import shutil
import subprocess
from typing import Optional

logger = logging.getLogger(__name__)


def token_from_gh_cli() -> Optional[str]:
    """Ask the GitHub CLI for its stored token, if the CLI is installed."""
    if shutil.which("gh") is None:
        return None

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            check=True,
            timeout=10,
        )
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
        logger.debug(f"gh auth token failed: {e}")
        return None

    token = result.stdout.strip()
    return token or None


def resolve_token(explicit: Optional[str] = None, configured: Optional[str] = None) -> str:
    """
    Pick the token to authenticate with.

    Order: explicit argument, configured token (GITHUB_TOKEN / GH_TOKEN),
    then `gh auth token`.

    Raises:
        ValueError: If no token can be found
    """
    if explicit:
        return explicit
    if configured:
        return configured

    token = token_from_gh_cli()
    if token:
        logger.debug("Using token from gh CLI")
        return token

    raise ValueError(
        "GitHub token required. Set GITHUB_TOKEN environment variable, "
        "pass --token, or log in with `gh auth login`."
    )
