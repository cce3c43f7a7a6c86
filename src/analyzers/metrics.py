"""
Pull Request Metrics Module.

Pure, stateless computations over a materialized list of pull requests:
- Outcome counts (open, closed without merge, merged)
- Merge-time percentiles (nearest-rank)
- Per-repository contribution rollups
- Day-of-week and weekly activity
"""

import math
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Sequence

import pandas as pd

from analyzers.models import (
    ActivityTimeline,
    ActivityTrend,
    DayOfWeekActivity,
    MergeMetrics,
    PRStats,
    RepoContribution,
    WeeklyActivity,
)
from miners.models import PullRequest

PERCENTILES = (50, 95, 99)
TREND_WINDOW_WEEKS = 4
WEEKDAYS = [
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]


def _to_frame(prs: Sequence[PullRequest]) -> pd.DataFrame:
    df = pd.DataFrame(
        [pr.model_dump() for pr in prs], columns=list(PullRequest.model_fields)
    )
    df["created_at"] = pd.to_datetime(df["created_at"], utc=True)
    df["merged_at"] = pd.to_datetime(df["merged_at"], utc=True)
    return df


def pr_stats(prs: Sequence[PullRequest]) -> PRStats:
    """
    Count pull requests by outcome.

    ``closed`` and ``merged`` partition the pull requests GitHub reports as
    closed: closed ones have no merge timestamp, merged ones do.

    Args:
        prs (Sequence[PullRequest]): Pull requests

    Returns:
        PRStats: Outcome counts and the number of distinct repositories
    """
    open_count = sum(1 for pr in prs if pr.state == "open")
    closed_count = sum(1 for pr in prs if pr.state == "closed" and pr.merged_at is None)
    merged_count = sum(1 for pr in prs if pr.merged_at is not None)

    return PRStats(
        total=len(prs),
        open=open_count,
        closed=closed_count,
        merged=merged_count,
        repositories=len({pr.repository for pr in prs}),
    )


def merge_time_hours(prs: Sequence[PullRequest]) -> List[float]:
    """Hours from creation to merge for each merged pull request, ascending."""
    return sorted(
        (pr.merged_at - pr.created_at).total_seconds() / 3600
        for pr in prs
        if pr.merged_at is not None
    )


def nearest_rank(sorted_values: Sequence[float], percentile: float) -> float:
    """
    Nearest-rank percentile, no interpolation.

    Args:
        sorted_values (Sequence[float]): Non-empty values in ascending order
        percentile (float): Percentile in (0, 100]

    Returns:
        float: Value at index ``ceil(p/100 * n) - 1``, clamped to 0
    """
    index = math.ceil(percentile * len(sorted_values) / 100) - 1
    return sorted_values[max(0, index)]


def round_hours(value: float) -> float:
    """Round to 2 decimals with halves rounded up (0.125 -> 0.13)."""
    return math.floor(value * 100 + 0.5) / 100


def merge_metrics(prs: Sequence[PullRequest]) -> MergeMetrics:
    """
    Merge-time statistics over the merged pull requests.

    Args:
        prs (Sequence[PullRequest]): Pull requests

    Returns:
        MergeMetrics: Count, mean and percentiles in hours, rounded to 2 decimals
    """
    hours = merge_time_hours(prs)
    if not hours:
        return MergeMetrics(count=0)

    p50, p95, p99 = (round_hours(nearest_rank(hours, p)) for p in PERCENTILES)
    return MergeMetrics(
        count=len(hours),
        average=round_hours(sum(hours) / len(hours)),
        p50=p50,
        p95=p95,
        p99=p99,
    )


def contributed_repos(prs: Sequence[PullRequest]) -> List[RepoContribution]:
    """
    Roll pull requests up per repository.

    Args:
        prs (Sequence[PullRequest]): Pull requests

    Returns:
        List[RepoContribution]: One entry per repository, most PRs first.
            Ties keep first-seen order.
    """
    if not prs:
        return []

    df = _to_frame(prs)
    df["merged"] = df["merged_at"].notna()
    grouped = (
        df.groupby("repository", sort=False)
        .agg(pr_count=("number", "size"), merged_count=("merged", "sum"))
        .sort_values("pr_count", ascending=False, kind="stable")
    )

    return [
        RepoContribution(
            repository=repository,
            pr_count=int(row["pr_count"]),
            merged_count=int(row["merged_count"]),
        )
        for repository, row in grouped.iterrows()
    ]


def activity_by_day(prs: Sequence[PullRequest]) -> DayOfWeekActivity:
    """
    Count pull requests created on each weekday (UTC).

    Args:
        prs (Sequence[PullRequest]): Pull requests

    Returns:
        DayOfWeekActivity: Per-weekday counts
    """
    if not prs:
        return DayOfWeekActivity()

    df = _to_frame(prs)
    counts = df["created_at"].dt.dayofweek.value_counts()
    return DayOfWeekActivity(
        **{WEEKDAYS[int(day)]: int(count) for day, count in counts.items()}
    )


def _week_start(moment: datetime) -> date:
    day = moment.astimezone(timezone.utc).date()
    return day - timedelta(days=day.weekday())


def _percent_change(recent: int, previous: int) -> float:
    if previous == 0:
        return 100.0 if recent > 0 else 0.0
    return round((recent - previous) / previous * 100, 1)


def activity_timeline(
    prs: Sequence[PullRequest], weeks: int = 12, now: Optional[datetime] = None
) -> ActivityTimeline:
    """
    Weekly created and merged counts with a four-week trend.

    Args:
        prs (Sequence[PullRequest]): Pull requests
        weeks (int): Number of weeks, ending with the current week
        now (Optional[datetime]): Reference time, defaults to the current UTC time

    Returns:
        ActivityTimeline: Weeks oldest first, and the percent change of the
            last four weeks against the four weeks before them
    """
    if weeks < 1:
        raise ValueError("weeks must be at least 1")

    current_week = _week_start(now or datetime.now(timezone.utc))
    created = Counter(_week_start(pr.created_at) for pr in prs)
    merged = Counter(_week_start(pr.merged_at) for pr in prs if pr.merged_at is not None)

    timeline = [
        WeeklyActivity(
            week_start=start,
            created=created.get(start, 0),
            merged=merged.get(start, 0),
        )
        for start in (
            current_week - timedelta(weeks=offset)
            for offset in range(weeks - 1, -1, -1)
        )
    ]

    def window_total(counter: Counter, first_offset: int) -> int:
        return sum(
            counter.get(current_week - timedelta(weeks=offset), 0)
            for offset in range(first_offset, first_offset + TREND_WINDOW_WEEKS)
        )

    trend = ActivityTrend(
        created=_percent_change(
            window_total(created, 0), window_total(created, TREND_WINDOW_WEEKS)
        ),
        merged=_percent_change(
            window_total(merged, 0), window_total(merged, TREND_WINDOW_WEEKS)
        ),
    )
    return ActivityTimeline(timeline=timeline, trend=trend)


def open_pull_requests(prs: Sequence[PullRequest]) -> List[PullRequest]:
    """Open pull requests, newest first."""
    return sorted(
        (pr for pr in prs if pr.state == "open"),
        key=lambda pr: pr.created_at,
        reverse=True,
    )
