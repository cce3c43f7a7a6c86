"""
Aggregation Service Test Suite.

Covers the read-side queries over a mocked miner:
- Outcome counts, merge metrics and repository rollups
- One collection per aggregate summary
- Activity timeline defaults and open pull requests
- Upstream failures surfaced as AggregationError
- Cached collections shared across queries
"""

import pytest
from unittest.mock import AsyncMock, Mock
from datetime import datetime, timedelta, timezone

from analyzers.aggregation import AggregationError, AggregationService
from analyzers.models import AggregateSummary, MergeMetrics, PRStats
from miners.errors import HttpError
from miners.github_miner import GitHubPRMiner
from miners.models import PullRequest, SearchIssuesPage
from storage.memory_cache import TTLCache

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_pr(number, state="closed", merged_after_hours=None, repository="octo/alpha"):
    merged_at = (
        CREATED + timedelta(hours=merged_after_hours)
        if merged_after_hours is not None
        else None
    )
    return PullRequest(
        number=number,
        title=f"PR {number}",
        state=state,
        created_at=CREATED,
        merged_at=merged_at,
        author="octocat",
        url=f"https://github.com/{repository}/pull/{number}",
        repository=repository,
    )


@pytest.fixture
def sample_pull_requests():
    return [
        make_pr(1, state="open"),
        make_pr(2, merged_after_hours=4),
        make_pr(3, repository="octo/beta"),
        make_pr(4, merged_after_hours=8, repository="octo/beta"),
        make_pr(5, merged_after_hours=2, repository="octo/beta"),
    ]


@pytest.fixture
def mock_miner(sample_pull_requests):
    """Mock pull request miner."""
    miner = Mock()
    miner.collect_authored_prs = AsyncMock(return_value=sample_pull_requests)
    miner.collect_repository_prs = AsyncMock(return_value=sample_pull_requests[:2])
    miner.collect_repositories = AsyncMock(return_value=[])
    return miner


@pytest.fixture
def service(mock_miner):
    return AggregationService(mock_miner, activity_weeks=6)


@pytest.mark.asyncio
async def test_get_aggregate_pr_stats(service, mock_miner):
    stats = await service.get_aggregate_pr_stats("octocat")

    assert stats == PRStats(total=5, open=1, closed=1, merged=3, repositories=2)
    mock_miner.collect_authored_prs.assert_awaited_once_with("octocat")


@pytest.mark.asyncio
async def test_get_aggregate_merge_metrics(service):
    result = await service.get_aggregate_merge_metrics("octocat")

    assert result == MergeMetrics(count=3, average=4.67, p50=4, p95=8, p99=8)


@pytest.mark.asyncio
async def test_get_contributed_repos(service):
    repos = await service.get_contributed_repos("octocat")

    assert [(r.repository, r.pr_count, r.merged_count) for r in repos] == [
        ("octo/beta", 3, 2),
        ("octo/alpha", 2, 1),
    ]


@pytest.mark.asyncio
async def test_get_aggregate_summary_single_collection(service, mock_miner):
    summary = await service.get_aggregate_summary("octocat")

    assert isinstance(summary, AggregateSummary)
    assert summary.pr_stats.total == 5
    assert summary.merge_metrics.count == 3
    assert summary.activity_by_day.monday == 5
    mock_miner.collect_authored_prs.assert_awaited_once()

    payload = summary.model_dump(mode="json", by_alias=True)
    assert set(payload) == {"prStats", "mergeMetrics", "contributedRepos", "activityByDay"}
    assert payload["contributedRepos"][0]["fullName"] == "octo/beta"


@pytest.mark.asyncio
async def test_get_activity_uses_default_weeks(service):
    activity = await service.get_activity("octocat")
    assert len(activity.timeline) == 6

    activity = await service.get_activity("octocat", weeks=2)
    assert len(activity.timeline) == 2


@pytest.mark.asyncio
async def test_get_open_prs(service):
    prs = await service.get_open_prs("octocat")
    assert [pr.number for pr in prs] == [1]


@pytest.mark.asyncio
async def test_repository_queries(service, mock_miner):
    stats = await service.get_repo_pr_stats("octo/alpha")
    merge = await service.get_repo_merge_metrics("octo/alpha")

    assert stats.total == 2
    assert merge.count == 1
    mock_miner.collect_repository_prs.assert_awaited_with("octo/alpha")


@pytest.mark.asyncio
async def test_collection_failure_raises_aggregation_error(service, mock_miner):
    mock_miner.collect_authored_prs.side_effect = HttpError(503, "Service Unavailable")

    with pytest.raises(AggregationError) as exc_info:
        await service.get_aggregate_pr_stats("octocat")
    assert "failed to load stats" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, HttpError)


@pytest.mark.asyncio
async def test_repositories_failure_raises_aggregation_error(service, mock_miner):
    mock_miner.collect_repositories.side_effect = HttpError(404, "Not Found")

    with pytest.raises(AggregationError):
        await service.get_repositories("ghost")


@pytest.mark.asyncio
async def test_second_query_within_ttl_served_from_cache():
    """Queries share one cached collection; the client is not called again."""
    page = SearchIssuesPage.model_validate(
        {
            "total_count": 1,
            "items": [
                {
                    "number": 1,
                    "title": "PR 1",
                    "state": "open",
                    "created_at": "2024-01-01T00:00:00Z",
                    "user": {"login": "octocat"},
                    "html_url": "https://github.com/octo/alpha/pull/1",
                    "repository_url": "https://api.github.com/repos/octo/alpha",
                }
            ],
        }
    )
    client = Mock()
    client.per_page = 100
    client.get = AsyncMock(return_value=page)
    client.rate_limit = AsyncMock()
    miner = GitHubPRMiner(client, TTLCache(ttl_seconds=300), page_delay=0, detail_delay=0)
    service = AggregationService(miner)

    first = await service.get_aggregate_pr_stats("octocat")
    second = await service.get_aggregate_pr_stats("octocat")
    await service.get_aggregate_merge_metrics("octocat")

    assert first == second
    assert client.get.await_count == 1
