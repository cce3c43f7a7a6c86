"""
Abstract Base Class for Pull Request Miners.

Defines the interface for pull request data mining implementations.
The aggregation service depends on this interface, not on a concrete miner.
"""

from abc import ABC, abstractmethod
from typing import List

from miners.models import PullRequest, RepositorySummary


class PullRequestMiner(ABC):
    """
    Abstract base class for pull request miners.

    Defines the contract for mining pull request data from a code host.
    Implementations should handle:
    - Discovery of a user's pull requests across repositories
    - Data transformation to common models
    - Caching of collected data
    """

    @abstractmethod
    async def collect_authored_prs(self, username: str) -> List[PullRequest]:
        """
        Collect every pull request authored by a user.

        Args:
            username (str): Account login

        Returns:
            List[PullRequest]: Pull requests with merge status reconciled

        Raises:
            Exception: If the first page of the collection fails
        """
        pass

    @abstractmethod
    async def collect_repository_prs(
        self, full_name: str, state: str = "all"
    ) -> List[PullRequest]:
        """
        Collect the pull requests of a single repository.

        Args:
            full_name (str): Repository full name (``owner/name``)
            state (str): ``open``, ``closed`` or ``all``

        Returns:
            List[PullRequest]: Pull requests of the repository
        """
        pass

    @abstractmethod
    async def collect_repositories(self, username: str) -> List[RepositorySummary]:
        """
        Collect the repositories owned by a user.

        Args:
            username (str): Account login

        Returns:
            List[RepositorySummary]: Repositories, most recently updated first
        """
        pass
