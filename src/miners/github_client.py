"""
GitHub API Client Module.

Thin async wrapper over PyGithub's requester for the raw REST and Search
endpoints the miners need. Responsibilities:
- Bearer token authentication when a token is configured
- Numeric page/per_page pagination
- Mapping upstream failures and timeouts to HttpError
- Parsing JSON into explicit response schemas at the boundary

The client never retries; callers decide whether to abort or degrade.
"""

import asyncio
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests
from github import Github, GithubException
from pydantic import TypeAdapter, ValidationError

from config import logger
from miners.errors import HttpError, ResponseSchemaError
from miners.models import RateLimitCore, RateLimitResponse

DEFAULT_BASE_URL = "https://api.github.com"
API_VERSION = "2022-11-28"


class GitHubApiClient:
    """
    Authenticated GitHub REST client.

    Requests run on a worker thread so concurrent aggregations are not
    blocked by each other's upstream calls.

    Attributes:
        github (Github): PyGithub client providing the requester
        per_page (int): Page size used for paginated endpoints
        headers (Dict[str, str]): Headers attached to every request
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 30,
        per_page: int = 100,
        github: Optional[Github] = None,
    ):
        """Initialize the client.

        Args:
            token (Optional[str]): GitHub token, anonymous requests when None.
            base_url (str): REST API base URL.
            timeout (int): Per-request timeout in whole seconds.
            per_page (int): Page size for paginated endpoints.
            github (Optional[Github]): Preconfigured PyGithub client.
        """
        self.per_page = per_page
        self.headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

        # Pacing belongs to the miners, so PyGithub's own throttle is off
        self.github = github or Github(
            base_url=base_url,
            timeout=int(math.ceil(timeout)),
            per_page=per_page,
            retry=None,
            seconds_between_requests=None,
            seconds_between_writes=None,
        )

    def _request(self, path: str, params: Optional[Dict[str, Any]]) -> Any:
        try:
            _, data = self.github.requester.requestJsonAndCheck(
                "GET", path, parameters=params, headers=dict(self.headers)
            )
        except GithubException as e:
            message = (
                e.data.get("message", str(e)) if isinstance(e.data, dict) else str(e)
            )
            raise HttpError(e.status, message) from e
        except requests.exceptions.Timeout as e:
            raise HttpError(None, f"request to {path} timed out") from e
        except requests.exceptions.RequestException as e:
            raise HttpError(None, str(e)) from e
        return data

    async def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        schema: Any = None,
    ) -> Any:
        """
        Issue a GET request.

        Args:
            path (str): API path, e.g. ``/search/issues``
            params (Optional[Dict[str, Any]]): Query parameters
            schema (Any): Optional type to validate the JSON into

        Returns:
            Any: Raw JSON, or an instance of ``schema`` when given

        Raises:
            HttpError: On non-2xx responses, transport failures and timeouts
            ResponseSchemaError: When the JSON does not match ``schema``
        """
        data = await asyncio.to_thread(self._request, path, params)
        if schema is None:
            return data
        try:
            return TypeAdapter(schema).validate_python(data)
        except ValidationError as e:
            raise ResponseSchemaError(path, str(e)) from e

    async def get_paginated(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        schema: Any = None,
        page_delay: float = 0.0,
    ) -> List[Any]:
        """
        Collect every page of a list endpoint.

        Stops when a page returns fewer than ``per_page`` items.

        Args:
            path (str): API path of a list endpoint
            params (Optional[Dict[str, Any]]): Extra query parameters
            schema (Any): Optional item type to validate each item into
            page_delay (float): Seconds to wait between pages

        Returns:
            List[Any]: Items from all pages, in upstream order
        """
        results: List[Any] = []
        page = 1
        while True:
            page_params = {**(params or {}), "per_page": self.per_page, "page": page}
            items = await self.get(
                path, page_params, schema=List[schema] if schema is not None else None
            )
            if not isinstance(items, list):
                raise ResponseSchemaError(path, "expected a JSON array")

            results.extend(items)
            if len(items) < self.per_page:
                break

            page += 1
            if page_delay:
                await asyncio.sleep(page_delay)

        return results

    async def rate_limit(self) -> RateLimitCore:
        """
        Fetch and log the core API rate limit status.

        Returns:
            RateLimitCore: Current core quota
        """
        response = await self.get("/rate_limit", schema=RateLimitResponse)
        core = response.resources.core
        reset_time = datetime.fromtimestamp(core.reset, tz=timezone.utc)
        now = datetime.now(timezone.utc)

        logger.info(
            {
                "message": "API rate limit status",
                "remaining_points": core.remaining,
                "total_points": core.limit,
                "reset_time": reset_time.isoformat(),
                "minutes_to_reset": (reset_time - now).total_seconds() / 60,
            }
        )

        # If less than 10% of rate limit remains, log a warning
        if 0 < core.remaining < core.limit * 0.1:
            logger.warning(
                {
                    "message": "GitHub API rate limit running low",
                    "remaining_points": core.remaining,
                    "reset_time": reset_time.isoformat(),
                }
            )
        elif core.remaining == 0:
            logger.critical(
                {
                    "message": "GitHub API rate limit exhausted",
                    "reset_time": reset_time.isoformat(),
                    "wait_time_seconds": (reset_time - now).total_seconds(),
                }
            )

        return core
