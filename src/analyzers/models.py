"""
Pull Request Metrics Models.

Derived statistics computed from a collection of pull requests. Serialized
to the dashboard as camelCase JSON via ``model_dump(by_alias=True)``.
"""

from datetime import date
from typing import List, Optional

from pydantic import Field

from miners.models import CamelModel


class PRStats(CamelModel):
    """Counts of pull requests by outcome."""

    total: int
    open: int
    closed: int
    merged: int
    repositories: int


class MergeMetrics(CamelModel):
    """
    Merge-time statistics in hours.

    All statistics are None when nothing has been merged.
    """

    count: int
    average: Optional[float] = None
    p50: Optional[float] = None
    p95: Optional[float] = None
    p99: Optional[float] = None


class RepoContribution(CamelModel):
    """Pull requests contributed to one repository."""

    repository: str = Field(alias="fullName")
    pr_count: int
    merged_count: int


class DayOfWeekActivity(CamelModel):
    """Pull requests created per weekday."""

    monday: int = 0
    tuesday: int = 0
    wednesday: int = 0
    thursday: int = 0
    friday: int = 0
    saturday: int = 0
    sunday: int = 0


class WeeklyActivity(CamelModel):
    """Pull requests created and merged in a Monday-start week."""

    week_start: date
    created: int
    merged: int


class ActivityTrend(CamelModel):
    """Percent change of the last four weeks against the four before."""

    created: float
    merged: float


class ActivityTimeline(CamelModel):
    timeline: List[WeeklyActivity]
    trend: ActivityTrend


class AggregateSummary(CamelModel):
    """Everything the dashboard's overview shows, from one collection."""

    pr_stats: PRStats
    merge_metrics: MergeMetrics
    contributed_repos: List[RepoContribution]
    activity_by_day: DayOfWeekActivity
