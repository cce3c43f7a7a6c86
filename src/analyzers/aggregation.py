"""
Pull Request Aggregation Module.

Composes the miner and the metrics functions behind the read-only queries
the dashboard consumes. Every query collects through the miner, so repeated
queries for the same user share one cached collection.
"""

from typing import List, Optional

from config import logger
from analyzers import metrics
from analyzers.models import (
    ActivityTimeline,
    AggregateSummary,
    MergeMetrics,
    PRStats,
    RepoContribution,
)
from miners.base import PullRequestMiner
from miners.errors import GitHubApiError
from miners.models import PullRequest, RepositorySummary


class AggregationError(Exception):
    """A query could not load its upstream data."""


class AggregationService:
    """
    Read-side aggregator over a user's pull requests.

    Attributes:
        miner (PullRequestMiner): Source of pull request collections.
        activity_weeks (int): Default length of the activity timeline.
    """

    def __init__(self, miner: PullRequestMiner, activity_weeks: int = 12):
        """Initialize the aggregation service.

        Args:
            miner (PullRequestMiner): Source of pull request collections.
            activity_weeks (int): Default length of the activity timeline.
        """
        self.miner = miner
        self.activity_weeks = activity_weeks

    async def _authored_prs(self, username: str) -> List[PullRequest]:
        try:
            return await self.miner.collect_authored_prs(username)
        except GitHubApiError as e:
            logger.error(
                {
                    "message": "Failed to load stats",
                    "username": username,
                    "error": str(e),
                }
            )
            raise AggregationError(f"failed to load stats for {username}") from e

    async def _repository_prs(self, full_name: str) -> List[PullRequest]:
        try:
            return await self.miner.collect_repository_prs(full_name)
        except GitHubApiError as e:
            logger.error(
                {
                    "message": "Failed to load repository stats",
                    "repository": full_name,
                    "error": str(e),
                }
            )
            raise AggregationError(f"failed to load stats for {full_name}") from e

    async def get_aggregate_pr_stats(self, username: str) -> PRStats:
        return metrics.pr_stats(await self._authored_prs(username))

    async def get_aggregate_merge_metrics(self, username: str) -> MergeMetrics:
        return metrics.merge_metrics(await self._authored_prs(username))

    async def get_contributed_repos(self, username: str) -> List[RepoContribution]:
        return metrics.contributed_repos(await self._authored_prs(username))

    async def get_aggregate_summary(self, username: str) -> AggregateSummary:
        """
        Compute every overview statistic from a single collection.

        Args:
            username (str): Account login

        Returns:
            AggregateSummary: PR stats, merge metrics, contributed repositories
                and day-of-week activity

        Raises:
            AggregationError: If the pull requests could not be collected
        """
        prs = await self._authored_prs(username)
        return AggregateSummary(
            pr_stats=metrics.pr_stats(prs),
            merge_metrics=metrics.merge_metrics(prs),
            contributed_repos=metrics.contributed_repos(prs),
            activity_by_day=metrics.activity_by_day(prs),
        )

    async def get_activity(self, username: str, weeks: Optional[int] = None) -> ActivityTimeline:
        prs = await self._authored_prs(username)
        return metrics.activity_timeline(prs, weeks or self.activity_weeks)

    async def get_open_prs(self, username: str) -> List[PullRequest]:
        return metrics.open_pull_requests(await self._authored_prs(username))

    async def get_repositories(self, username: str) -> List[RepositorySummary]:
        try:
            return await self.miner.collect_repositories(username)
        except GitHubApiError as e:
            logger.error(
                {
                    "message": "Failed to load repositories",
                    "username": username,
                    "error": str(e),
                }
            )
            raise AggregationError(f"failed to load repositories for {username}") from e

    async def get_repo_pr_stats(self, full_name: str) -> PRStats:
        return metrics.pr_stats(await self._repository_prs(full_name))

    async def get_repo_merge_metrics(self, full_name: str) -> MergeMetrics:
        return metrics.merge_metrics(await self._repository_prs(full_name))
