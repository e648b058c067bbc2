#!/usr/bin/env python3
"""
Main entry point for RepoWatchScanner.
Watches recently created repositories of a GitHub user or organization.
"""

import logging
import sys
import argparse
from datetime import datetime, timezone

import requests

from core.entities import OwnerKind, ScanOptions
from core.use_cases import ScanAborted, ScanAndWatchRepositories, resolve_cutoff
from infrastructure.config import Settings
from infrastructure.github_client import GitHubClient
from infrastructure.rate_limit import GitHubAPIError

logger = logging.getLogger(__name__)


def parse_since(value: str) -> datetime:
    """argparse type for --since: ISO-8601 date or timestamp, UTC if naive."""
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid ISO-8601 timestamp: {value!r}"
        ) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


MAX_DAYS = 36500


def day_count(value: str) -> int:
    """argparse type for --days: 0 to MAX_DAYS."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if not 0 <= number <= MAX_DAYS:
        raise argparse.ArgumentTypeError(f"must be between 0 and {MAX_DAYS}")
    return number


def owner_kind(value: str) -> OwnerKind:
    """argparse type for --owner-kind."""
    try:
        return OwnerKind.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Watch recently created GitHub repositories of a user or organization"
    )
    parser.add_argument(
        "owner",
        help="User or organization login",
    )
    parser.add_argument(
        "--owner-kind",
        type=owner_kind,
        default=None,
        help="user, org or organization (default: detect from GitHub)",
    )
    window = parser.add_mutually_exclusive_group()
    window.add_argument(
        "--since",
        type=parse_since,
        default=None,
        help="Only repositories created at or after this ISO-8601 timestamp",
    )
    window.add_argument(
        "--days",
        type=day_count,
        default=None,
        help="Only repositories created in the last N days (default: 30)",
    )
    parser.add_argument(
        "--limit",
        type=positive_int,
        default=1000,
        help="Maximum number of repositories to inspect (default: 1000)",
    )
    parser.add_argument(
        "--include-archived",
        action="store_true",
        help="Also watch archived repositories",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log what would be watched without changing anything",
    )
    parser.add_argument(
        "--token",
        type=str,
        default=None,
        help="GitHub token (default: GITHUB_TOKEN, GH_TOKEN or `gh auth token`)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except ValueError as e:
        parser.error(str(e))

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.since is None and args.days is None:
        args.days = 30
    try:
        cutoff = resolve_cutoff(since=args.since, days=args.days)
    except ValueError as e:
        parser.error(str(e))

    try:
        options = ScanOptions(
            owner=args.owner,
            owner_kind=args.owner_kind,
            cutoff=cutoff,
            limit=args.limit,
            include_archived=args.include_archived,
            dry_run=args.dry_run,
        )

        logger.info("=" * 60)
        logger.info("RepoWatchScanner - Watch recently created repositories")
        logger.info("=" * 60)
        logger.info(f"Owner: {options.owner}")
        logger.info(f"Owner kind: {options.owner_kind.value if options.owner_kind else 'auto'}")
        logger.info(f"Cutoff: {options.cutoff.isoformat()}")
        logger.info(f"Limit: {options.limit:,}")
        logger.info(f"Include archived: {options.include_archived}")
        logger.info(f"Dry run: {options.dry_run}")
        logger.info("=" * 60)

        github = GitHubClient(token=args.token, settings=settings)
        result = ScanAndWatchRepositories(github).execute(options)

        logger.info("=" * 60)
        logger.info("Scan Summary:")
        logger.info(f"  Processed: {result.processed:,}")
        logger.info(f"  Watched: {result.watched:,}")
        if options.dry_run:
            logger.info(f"  Would watch: {result.would_watch:,}")
        logger.info(f"  Skipped: {result.skipped:,}")
        logger.info(f"  Failed: {result.failed:,}")
        logger.info(f"  Stopped by: {result.stop_reason.value}")
        for full_name, detail in result.failures:
            logger.info(f"    {full_name}: {detail}")
        logger.info("=" * 60)

        print(result.summary())
        return result.exit_code

    except KeyboardInterrupt:
        logger.info("\nScan interrupted by user.")
        return 130  # Standard exit code for SIGINT

    except ScanAborted as e:
        logger.error(f"{e} ({e.result.summary()})", exc_info=True)
        return 1

    except (GitHubAPIError, requests.RequestException, ValueError) as e:
        logger.error(f"Scan failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
