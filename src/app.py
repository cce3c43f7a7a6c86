"""
Main Application Entry Point.

Wires the aggregation service from settings and either prints a user's
aggregate pull request summary as JSON or serves the dashboard API:

  python src/app.py --username octocat
  python src/app.py --serve
"""

import argparse
import asyncio
import json
import sys
from typing import Optional

from config import settings, logger
from analyzers.aggregation import AggregationError, AggregationService
from api import create_app
from miners.base import PullRequestMiner
from miners.github_client import GitHubApiClient
from miners.github_miner import GitHubPRMiner
from storage.memory_cache import TTLCache


def build_service() -> AggregationService:
    """
    Construct the aggregation service and its collaborators from settings.

    Returns:
        AggregationService: Service backed by a cached GitHub miner
    """
    logger.debug({"message": "initializing github client"})
    client = GitHubApiClient(
        token=settings.token,
        base_url=settings.github_api_url,
        timeout=settings.request_timeout_seconds,
        per_page=settings.per_page,
    )
    cache = TTLCache(ttl_seconds=settings.cache_ttl_seconds)

    logger.debug({"message": "initializing pull request miner"})
    miner: PullRequestMiner = GitHubPRMiner(
        client,
        cache,
        search_result_limit=settings.search_result_limit,
        page_delay=settings.search_page_delay_seconds,
        detail_delay=settings.detail_fetch_delay_seconds,
    )
    return AggregationService(miner, activity_weeks=settings.activity_weeks)


async def main(username: str) -> dict:
    """
    Compute the aggregate summary for one user.

    Args:
        username (str): Account login

    Returns:
        dict: camelCase JSON-ready summary
    """
    logger.info({"message": "Starting aggregation", "username": username})
    service = build_service()
    summary = await service.get_aggregate_summary(username)
    logger.info({"message": "application finished", "username": username})
    return summary.model_dump(mode="json", by_alias=True)


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="GitHub pull request analytics")
    parser.add_argument(
        "--username",
        default=settings.github_username,
        help="GitHub user to aggregate (default: GITHUB_USERNAME)",
    )
    parser.add_argument(
        "--serve", action="store_true", help="Serve the dashboard JSON API"
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()

    if args.serve:
        logger.info({"message": "Starting API server", "host": settings.host, "port": settings.port})
        create_app(build_service(), args.username).run(
            host=settings.host, port=settings.port, debug=settings.dev
        )
    elif not args.username:
        sys.exit("error: --username or GITHUB_USERNAME is required")
    else:
        try:
            print(json.dumps(asyncio.run(main(args.username)), indent=2))
        except AggregationError as e:
            sys.exit(f"error: {e}")
