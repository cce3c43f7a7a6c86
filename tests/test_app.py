"""
Application Wiring Test Suite.

Builds the service from the default settings:
- Real PyGithub client behind the API client
- Pacing and cache settings reach the miner
- Structured wiring log records
- Command line parsing
"""

from unittest.mock import patch

from github import Github

import app
from analyzers.aggregation import AggregationService
from config import settings
from miners.github_client import GitHubApiClient
from miners.github_miner import GitHubPRMiner


def test_build_service_from_settings():
    service = app.build_service()

    assert isinstance(service, AggregationService)
    assert service.activity_weeks == settings.activity_weeks

    miner = service.miner
    assert isinstance(miner, GitHubPRMiner)
    assert miner.page_delay == settings.search_page_delay_seconds
    assert miner.detail_delay == settings.detail_fetch_delay_seconds
    assert miner.search_result_limit == settings.search_result_limit
    assert miner.cache.get(("authored-prs", "octocat")) is None

    assert isinstance(miner.client, GitHubApiClient)
    assert isinstance(miner.client.github, Github)
    assert miner.client.per_page == settings.per_page


def test_parse_args():
    args = app.parse_args(["--username", "octocat"])
    assert args.username == "octocat"
    assert not args.serve

    assert app.parse_args(["--serve"]).serve


def test_build_service_logs_structured_records():
    with patch("app.logger") as logger:
        app.build_service()

    messages = [c.args[0] for c in logger.debug.call_args_list]
    assert messages == [
        {"message": "initializing github client"},
        {"message": "initializing pull request miner"},
    ]
