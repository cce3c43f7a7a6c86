"""
GitHub Pull Request Mining Module.

Collects a user's pull requests across every repository through the Search
API, then reconciles merge status with per-pull detail fetches because
search results never carry ``merged_at``. Collections are cached per user.
"""

import asyncio
from typing import List

from config import logger
from miners.base import PullRequestMiner
from miners.errors import GitHubApiError, PartialCollectionError
from miners.github_client import GitHubApiClient
from miners.models import (
    PullRequest,
    PullRequestDetail,
    RepositoryItem,
    RepositorySummary,
    SearchIssuesPage,
)
from storage.memory_cache import TTLCache

SEARCH_ISSUES_PATH = "/search/issues"
SEARCH_RESULT_LIMIT = 1000


class GitHubPRMiner(PullRequestMiner):
    """
    GitHubPRMiner collects pull requests from GitHub.

    Paging and enrichment are sequential with fixed delays to stay clear of
    GitHub's secondary rate limits.
    """

    def __init__(
        self,
        client: GitHubApiClient,
        cache: TTLCache,
        search_result_limit: int = SEARCH_RESULT_LIMIT,
        page_delay: float = 0.1,
        detail_delay: float = 0.05,
    ):
        """Initialize the miner.

        Args:
            client (GitHubApiClient): Upstream API client.
            cache (TTLCache): Cache for collected data.
            search_result_limit (int): Maximum search results to accumulate.
            page_delay (float): Seconds between search pages.
            detail_delay (float): Seconds between pull request detail fetches.
        """
        self.client = client
        self.cache = cache
        self.search_result_limit = search_result_limit
        self.page_delay = page_delay
        self.detail_delay = detail_delay

    async def collect_authored_prs(self, username: str) -> List[PullRequest]:
        """
        Collect all pull requests authored by ``username``.

        Args:
            username (str): Account login

        Returns:
            List[PullRequest]: Pull requests, newest first, merge status reconciled

        Raises:
            GitHubApiError: If the first search page fails
        """
        cache_key = ("authored-prs", username.lower())
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug({"message": "Authored PRs served from cache", "username": username})
            return list(cached)

        logger.info({"message": "Starting authored PR collection", "username": username})
        await self._check_rate_limit(username)

        prs = await self._search_authored_prs(username)
        enriched = await self._enrich_merge_status(username, prs)

        self.cache.set(cache_key, tuple(enriched))
        logger.info(
            {
                "message": "Authored PR collection completed",
                "username": username,
                "pull_requests": len(enriched),
            }
        )
        return enriched

    async def _check_rate_limit(self, username: str) -> None:
        """Log the remaining API quota before a collection starts.

        The quota check is informational: a failure here only logs.
        """
        try:
            await self.client.rate_limit()
        except GitHubApiError as e:
            logger.warning(
                {
                    "message": "Rate limit check failed",
                    "username": username,
                    "error": str(e),
                }
            )

    async def _search_authored_prs(self, username: str) -> List[PullRequest]:
        collected: List[PullRequest] = []
        page = 1

        while True:
            params = {
                "q": f"author:{username} type:pr",
                "sort": "created",
                "order": "desc",
                "per_page": self.client.per_page,
                "page": page,
            }
            try:
                result = await self.client.get(
                    SEARCH_ISSUES_PATH, params, schema=SearchIssuesPage
                )
            except GitHubApiError as e:
                if page == 1:
                    logger.error(
                        {
                            "message": "Pull request search failed",
                            "username": username,
                            "error": str(e),
                        }
                    )
                    raise
                logger.warning(
                    PartialCollectionError("search", username, e, page=page).to_log()
                )
                break

            collected.extend(PullRequest.from_search_item(item) for item in result.items)

            # The Search API never returns more than 1000 results per query
            if (
                len(result.items) < self.client.per_page
                or len(collected) >= self.search_result_limit
            ):
                break

            page += 1
            await asyncio.sleep(self.page_delay)

        return collected[: self.search_result_limit]

    async def _enrich_merge_status(
        self, username: str, prs: List[PullRequest]
    ) -> List[PullRequest]:
        enriched = []
        for pr in prs:
            if pr.state == "closed" and pr.merged_at is None:
                try:
                    detail = await self.client.get(
                        f"/repos/{pr.repository}/pulls/{pr.number}",
                        schema=PullRequestDetail,
                    )
                    pr = pr.model_copy(update={"merged_at": detail.merged_at})
                except GitHubApiError as e:
                    # Keep the PR, merge status stays unknown
                    logger.warning(
                        PartialCollectionError(
                            "enrichment", username, e, pr=f"{pr.repository}#{pr.number}"
                        ).to_log()
                    )
                await asyncio.sleep(self.detail_delay)
            enriched.append(pr)

        return enriched

    async def collect_repository_prs(
        self, full_name: str, state: str = "all"
    ) -> List[PullRequest]:
        """
        Collect the pull requests of one repository.

        The pulls endpoint reports merge timestamps, so no enrichment is needed.

        Args:
            full_name (str): Repository full name (``owner/name``)
            state (str): ``open``, ``closed`` or ``all``

        Returns:
            List[PullRequest]: Pull requests of the repository

        Raises:
            GitHubApiError: If any page fails
        """
        cache_key = ("repo-prs", full_name.lower(), state)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return list(cached)

        logger.info(
            {"message": "Collecting repository PRs", "repository": full_name, "state": state}
        )
        details = await self.client.get_paginated(
            f"/repos/{full_name}/pulls",
            {"state": state},
            schema=PullRequestDetail,
            page_delay=self.page_delay,
        )
        prs = [PullRequest.from_detail(detail, full_name) for detail in details]

        self.cache.set(cache_key, tuple(prs))
        return prs

    async def collect_repositories(self, username: str) -> List[RepositorySummary]:
        """
        Collect the repositories owned by ``username``.

        Args:
            username (str): Account login

        Returns:
            List[RepositorySummary]: Repositories, most recently updated first

        Raises:
            GitHubApiError: If any page fails
        """
        cache_key = ("repositories", username.lower())
        cached = self.cache.get(cache_key)
        if cached is not None:
            return list(cached)

        items = await self.client.get_paginated(
            f"/users/{username}/repos",
            {"sort": "updated"},
            schema=RepositoryItem,
            page_delay=self.page_delay,
        )
        repositories = [RepositorySummary.from_item(item) for item in items]

        self.cache.set(cache_key, tuple(repositories))
        logger.info(
            {
                "message": "Repository collection completed",
                "username": username,
                "repositories": len(repositories),
            }
        )
        return repositories
