"""
Business logic / use cases for watching GitHub repositories.
This layer orchestrates the listing and write calls of the GitHub client.
"""

import logging
from typing import Optional
from datetime import datetime, timedelta, timezone

import requests

from core.entities import OwnerKind, RepositorySummary, ScanOptions, ScanResult, StopReason
from infrastructure.github_client import GitHubClient
from infrastructure.rate_limit import GitHubAPIError

logger = logging.getLogger(__name__)


class ScanAborted(Exception):
    """
    Raised when the listing call fails. Carries the partial result,
    which has stop_reason ABORTED.
    """
    def __init__(self, result: ScanResult, reason: str):
        self.result = result
        super().__init__(f"Scan aborted: {reason}")


def resolve_cutoff(
    since: Optional[datetime] = None,
    days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> datetime:
    """
    Compute the cutoff instant from an explicit timestamp or a day count.

    Args:
        since: Explicit cutoff; naive values are taken as UTC
        days: Number of days back from now
        now: Reference instant (defaults to the current time)

    Returns:
        Timezone-aware UTC cutoff
    """
    if since is not None and days is not None:
        raise ValueError("since and days are mutually exclusive")

    if since is not None:
        if since.tzinfo is None:
            since = since.replace(tzinfo=timezone.utc)
        return since.astimezone(timezone.utc)

    if days is None:
        raise ValueError("either since or days is required")
    if days < 0:
        raise ValueError("days cannot be negative")

    now = now or datetime.now(timezone.utc)
    try:
        return now.astimezone(timezone.utc) - timedelta(days=days)
    except OverflowError:
        raise ValueError(f"days out of range: {days}") from None


class ResolveOwnerKind:
    """
    Use case for deciding whether an owner is a user or an organization.
    """

    def __init__(self, github_client: GitHubClient):
        self.github = github_client

    def execute(self, owner: str, owner_kind: Optional[OwnerKind] = None) -> OwnerKind:
        """
        Return the supplied kind, or probe GitHub when none was given.

        Raises:
            GitHubAPIError: If the owner cannot be looked up
        """
        if owner_kind is not None:
            return owner_kind

        kind = self.github.get_owner_kind(owner)
        logger.info(f"Detected {owner} as {kind.value}")
        return kind


class ScanAndWatchRepositories:
    """
    Use case for paging through an owner's repositories, newest first,
    and watching every non-archived one created at or after the cutoff.
    Write failures are tallied per item; listing failures abort the scan.
    """

    def __init__(self, github_client: GitHubClient):
        """
        Initialize the use case.

        Args:
            github_client: GitHub API client
        """
        self.github = github_client

    def execute(self, options: ScanOptions) -> ScanResult:
        """
        Execute the scan.

        Args:
            options: Owner, cutoff, limit and mode flags

        Returns:
            Final scan result

        Raises:
            ScanAborted: If a listing call fails
            GitHubAPIError: If owner kind resolution fails
        """
        owner_kind = ResolveOwnerKind(self.github).execute(
            options.owner, options.owner_kind
        )
        result = ScanResult()
        page_size = options.page_size
        page = 1

        logger.info(
            f"Scanning {owner_kind.value} {options.owner}: created since "
            f"{options.cutoff.isoformat()}, limit {options.limit}"
            f"{' (dry run)' if options.dry_run else ''}"
        )

        while result.stop_reason == StopReason.SCANNING:
            try:
                repositories = self.github.list_repositories(
                    owner_kind, options.owner, page=page, per_page=page_size
                )
            except (GitHubAPIError, requests.RequestException) as e:
                result.stop_reason = StopReason.ABORTED
                logger.error(f"Listing page {page} failed: {e}")
                raise ScanAborted(result, str(e)) from e

            for repo in repositories:
                if result.processed >= options.limit:
                    logger.info(f"Reached limit of {options.limit} repositories")
                    result.stop_reason = StopReason.LIMIT
                    break

                result.processed += 1

                if not self._handle(repo, options, result):
                    result.stop_reason = StopReason.CUTOFF
                    break

            if result.stop_reason != StopReason.SCANNING:
                break

            if len(repositories) < page_size:
                result.stop_reason = StopReason.EXHAUSTED
            elif result.processed >= options.limit:
                logger.info(f"Reached limit of {options.limit} repositories")
                result.stop_reason = StopReason.LIMIT
            else:
                page += 1

        logger.info(f"Scan finished: {result.summary()}")
        return result

    def _handle(self, repo: RepositorySummary, options: ScanOptions, result: ScanResult) -> bool:
        """
        Classify one repository and watch it if it qualifies.

        Returns:
            False if the repository is older than the cutoff and the scan must stop
        """
        if repo.archived and not options.include_archived:
            logger.debug(f"Skipping archived repository {repo.full_name}")
            result.skipped += 1
            return True

        if repo.created_at < options.cutoff:
            # Boundary item stays counted in processed without a classification
            logger.info(
                f"Reached cutoff at {repo.full_name or '<unnamed>'} "
                f"(created {repo.created_at.isoformat()})"
            )
            return False

        if not repo.full_name:
            logger.debug("Skipping repository without a name")
            result.skipped += 1
            return True

        if options.dry_run:
            logger.info(f"[dry-run] Would watch {repo.full_name}")
            result.would_watch += 1
            return True

        try:
            self.github.set_watch(repo.full_name, subscribed=True, ignored=False)
        except (GitHubAPIError, requests.RequestException) as e:
            logger.warning(f"Failed to watch {repo.full_name}: {e}")
            result.failed += 1
            result.failures.append((repo.full_name, str(e)))
            return True

        logger.info(f"Watching {repo.full_name}")
        result.watched += 1
        return True
