"""
Upstream Error Types.

Errors raised at the GitHub API boundary and the partial-collection record
logged by the miners when a page or enrichment fetch fails mid-collection.
"""

from typing import Any, Dict, Optional


class GitHubApiError(Exception):
    """Base class for failures talking to the GitHub API."""


class HttpError(GitHubApiError):
    """
    Non-2xx response, transport failure or timeout.

    Attributes:
        status (Optional[int]): HTTP status code, None when no response arrived
        message (str): Upstream error message
    """

    def __init__(self, status: Optional[int], message: str):
        self.status = status
        self.message = message
        super().__init__(f"HTTP {status if status is not None else 'error'}: {message}")


class ResponseSchemaError(GitHubApiError):
    """Upstream JSON did not match the expected response schema."""

    def __init__(self, path: str, details: str):
        self.path = path
        self.details = details
        super().__init__(f"Unexpected response shape from {path}: {details}")


class PartialCollectionError(GitHubApiError):
    """
    A page or enrichment fetch that failed during collection.

    Never raised: the miner logs it and continues with the data collected so far.
    """

    def __init__(
        self,
        stage: str,
        username: str,
        cause: Exception,
        page: Optional[int] = None,
        pr: Optional[str] = None,
    ):
        self.stage = stage
        self.username = username
        self.cause = cause
        self.page = page
        self.pr = pr
        super().__init__(f"{stage} failed for {username}: {cause}")

    def to_log(self) -> Dict[str, Any]:
        """Structured log payload for this failure."""
        payload = {
            "message": "Partial collection, continuing with collected data",
            "stage": self.stage,
            "username": self.username,
            "error": str(self.cause),
        }
        if self.page is not None:
            payload["page"] = self.page
        if self.pr is not None:
            payload["pull_request"] = self.pr
        return payload
