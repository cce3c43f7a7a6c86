"""
GitHub Data Models.

Response schemas for the GitHub endpoints the miners call, and the
normalized models they produce. Uses Pydantic for validation and serialization.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for models serialized to the dashboard as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Upstream response schemas


class UserRef(BaseModel):
    """Account reference embedded in issue and pull payloads."""

    login: str


class PullRequestRef(BaseModel):
    """The ``pull_request`` marker attached to search results."""

    url: Optional[str] = None
    merged_at: Optional[datetime] = None


class SearchIssueItem(BaseModel):
    """One item of a ``/search/issues`` result page."""

    number: int
    title: str
    state: Literal["open", "closed"]
    created_at: datetime
    closed_at: Optional[datetime] = None
    user: UserRef
    html_url: str
    repository_url: str
    comments: int = 0
    pull_request: Optional[PullRequestRef] = None

    @property
    def repository(self) -> str:
        """Repository full name (``owner/name``) taken from repository_url."""
        return "/".join(self.repository_url.rstrip("/").split("/")[-2:])


class SearchIssuesPage(BaseModel):
    """A ``/search/issues`` result page."""

    total_count: int
    incomplete_results: bool = False
    items: List[SearchIssueItem]


class PullRequestDetail(BaseModel):
    """A pull from ``/repos/{owner}/{repo}/pulls`` or its detail endpoint."""

    number: int
    title: str
    state: Literal["open", "closed"]
    created_at: datetime
    closed_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None
    user: Optional[UserRef] = None
    html_url: str
    comments: int = 0


class RepositoryItem(BaseModel):
    """A repository from ``/users/{user}/repos``."""

    name: str
    full_name: str
    description: Optional[str] = None
    html_url: str
    stargazers_count: int = 0
    language: Optional[str] = None
    updated_at: Optional[datetime] = None


class RateLimitCore(BaseModel):
    """Core quota from ``/rate_limit``."""

    limit: int
    remaining: int
    reset: int


class RateLimitResources(BaseModel):
    core: RateLimitCore


class RateLimitResponse(BaseModel):
    resources: RateLimitResources


# Normalized models


class PullRequest(CamelModel):
    """
    A pull request authored by the user.

    Assembled from a search result and, for closed pulls, a detail fetch.
    Immutable once built: enrichment produces a copy.
    """

    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    state: Literal["open", "closed"]
    created_at: datetime
    closed_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None
    author: str
    url: str
    repository: str
    comments: int = 0

    @model_validator(mode="after")
    def merged_only_when_closed(self) -> "PullRequest":
        if self.merged_at is not None and self.state != "closed":
            raise ValueError("merged_at is only valid for closed pull requests")
        return self

    @classmethod
    def from_search_item(cls, item: SearchIssueItem) -> "PullRequest":
        """Build a pull request from a search result item.

        Args:
            item (SearchIssueItem): Parsed search item.

        Returns:
            PullRequest: Pull request with merged_at only if search reported it.
        """
        merged_at = item.pull_request.merged_at if item.pull_request else None
        return cls(
            number=item.number,
            title=item.title,
            state=item.state,
            created_at=item.created_at,
            closed_at=item.closed_at,
            merged_at=merged_at if item.state == "closed" else None,
            author=item.user.login,
            url=item.html_url,
            repository=item.repository,
            comments=item.comments,
        )

    @classmethod
    def from_detail(cls, detail: PullRequestDetail, repository: str) -> "PullRequest":
        """Build a pull request from a pulls endpoint payload.

        Args:
            detail (PullRequestDetail): Parsed pull payload.
            repository (str): Repository full name the pull belongs to.

        Returns:
            PullRequest: Pull request carrying the true merge timestamp.
        """
        return cls(
            number=detail.number,
            title=detail.title,
            state=detail.state,
            created_at=detail.created_at,
            closed_at=detail.closed_at,
            merged_at=detail.merged_at,
            author=detail.user.login if detail.user else "ghost",
            url=detail.html_url,
            repository=repository,
            comments=detail.comments,
        )


class RepositorySummary(CamelModel):
    """A repository owned by the user."""

    name: str
    full_name: str
    description: Optional[str] = None
    url: str
    stars: int = 0
    language: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_item(cls, item: RepositoryItem) -> "RepositorySummary":
        return cls(
            name=item.name,
            full_name=item.full_name,
            description=item.description,
            url=item.html_url,
            stars=item.stargazers_count,
            language=item.language,
            updated_at=item.updated_at,
        )
