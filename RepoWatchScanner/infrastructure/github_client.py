"""
GitHub REST API client for listing repositories and managing watch subscriptions.
"""

import logging
from typing import Any, Optional
from datetime import datetime
import requests

from core.entities import OwnerKind, RepositorySummary
from infrastructure.auth import resolve_token
from infrastructure.config import Settings
from infrastructure.rate_limit import (
    GitHubAPIError,
    RateLimitMonitor,
    RateLimitExceeded,
)

logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO-8601 timestamp such as 2024-01-31T12:00:00Z."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class GitHubClient:
    """
    Client for the parts of GitHub's REST API the scanner needs.
    Handles authentication and rate limit bookkeeping; no retries.
    """

    USER_AGENT = "RepoWatchScanner/1.0"
    MAX_PER_PAGE = 100

    def __init__(
        self,
        token: Optional[str] = None,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub personal access token (falls back to settings, then gh CLI)
            settings: Runtime settings (defaults to Settings.from_env())
            session: HTTP session to use (a new requests.Session by default)
        """
        self.settings = settings or Settings.from_env()
        self.token = resolve_token(token, self.settings.token)
        self.base_url = self.settings.api_url
        self.timeout = self.settings.request_timeout
        self.rate_limiter = RateLimitMonitor()
        self._login: Optional[str] = None

        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": self.USER_AGENT,
        })

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        """
        Make a REST request.

        Args:
            method: HTTP method
            path: API path starting with "/"
            params: Query parameters
            json: JSON body

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            RateLimitExceeded: If the rate limit budget is exhausted
            GitHubAPIError: For any other non-success status
            requests.RequestException: For network errors
        """
        url = f"{self.base_url}{path}"
        response = self.session.request(
            method,
            url,
            params=params,
            json=json,
            timeout=self.timeout,
        )
        self.rate_limiter.update_from_headers(response.headers)

        if self.rate_limiter.is_exhausted(response.status_code, response.headers):
            raise RateLimitExceeded(
                self.rate_limiter.reset_at or datetime.now().astimezone(),
                url,
                response.status_code,
            )

        if not 200 <= response.status_code < 300:
            raise GitHubAPIError(response.status_code, self._error_message(response), url)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        """Extract a short message from an error response."""
        try:
            body = response.json()
        except ValueError:
            return (response.text or "")[:300]
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return (response.text or "")[:300]

    def get_authenticated_login(self) -> str:
        """
        Get the login of the identity the token belongs to.

        Returns:
            Login name
        """
        if self._login is None:
            data = self._request("GET", "/user")
            self._login = data["login"]
            logger.info(f"Authenticated as {self._login}")
        return self._login

    def get_owner_kind(self, owner: str) -> OwnerKind:
        """
        Ask GitHub whether an account is a user or an organization.

        Args:
            owner: Account login

        Returns:
            OwnerKind.ORGANIZATION if GitHub reports it as such, else OwnerKind.USER
        """
        data = self._request("GET", f"/users/{owner}")
        if (data or {}).get("type") == "Organization":
            return OwnerKind.ORGANIZATION
        return OwnerKind.USER

    def _list_path(self, owner_kind: OwnerKind, owner: str) -> tuple[str, dict]:
        """Pick the listing endpoint for an owner."""
        if owner_kind == OwnerKind.ORGANIZATION:
            return f"/orgs/{owner}/repos", {"type": "all"}

        # /users/{owner}/repos only returns public repositories, even for ourselves
        if owner.lower() == self.get_authenticated_login().lower():
            return "/user/repos", {"affiliation": "owner"}
        return f"/users/{owner}/repos", {"type": "owner"}

    def list_repositories(
        self,
        owner_kind: OwnerKind,
        owner: str,
        page: int = 1,
        per_page: int = 100,
    ) -> list[RepositorySummary]:
        """
        List one page of an owner's repositories, newest first.

        Args:
            owner_kind: Whether owner is a user or an organization
            owner: Account login
            page: 1-based page number
            per_page: Page size (clamped to 1..100)

        Returns:
            Repositories sorted by creation time descending
        """
        path, params = self._list_path(owner_kind, owner)
        params.update({
            "sort": "created",
            "direction": "desc",
            "per_page": max(1, min(per_page, self.MAX_PER_PAGE)),
            "page": page,
        })

        logger.debug(f"Fetching {path} page {page} (per_page={params['per_page']})")

        data = self._request("GET", path, params=params) or []

        try:
            repositories = [
                RepositorySummary(
                    full_name=item.get("full_name") or "",
                    created_at=parse_timestamp(item["created_at"]),
                    archived=bool(item.get("archived", False)),
                )
                for item in data
            ]
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise GitHubAPIError(
                200, f"Malformed repository listing: {e!r}", f"{self.base_url}{path}"
            ) from e

        logger.info(
            f"Fetched {len(repositories)} repositories for {owner} (page {page}). "
            f"Rate limit: {self.rate_limiter.remaining} remaining"
        )
        return repositories

    def set_watch(self, full_name: str, subscribed: bool = True, ignored: bool = False):
        """
        Set the watch subscription of a repository.

        Args:
            full_name: Repository in owner/name form
            subscribed: Receive notifications for the repository
            ignored: Block all notifications for the repository
        """
        self._request(
            "PUT",
            f"/repos/{full_name}/subscription",
            json={"subscribed": subscribed, "ignored": ignored},
        )
