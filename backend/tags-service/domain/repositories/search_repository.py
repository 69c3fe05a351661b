"""Search repository interface for the tags service.

This module defines the repository interface for browsing tagged objects
following Domain-Driven Design principles.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Tuple

from domain.entities.search import ScopeTotal, TaggedObject, TagSearchCriteria

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


class SearchRepository(ABC):
    """Abstract repository interface for read-only tag searches.

    This interface defines the contract for search repositories,
    keeping the domain layer independent of infrastructure concerns.
    """

    @abstractmethod
    async def count_by_scope(
        self, db_session: "Session", tag_ids: List[int]
    ) -> List[ScopeTotal]:
        """Count objects carrying every given tag, grouped by scope.

        Args:
            db_session: SQLAlchemy database session for this operation
            tag_ids: Tags the objects must all carry

        Returns:
            List[ScopeTotal]: One entry per scope with at least one match,
                ordered by scope name
        """
        pass

    @abstractmethod
    async def search_objects(
        self, db_session: "Session", criteria: TagSearchCriteria
    ) -> Tuple[List[TaggedObject], int]:
        """Find objects carrying every tag in the criteria.

        Args:
            db_session: SQLAlchemy database session for this operation
            criteria: The search criteria containing all search parameters

        Returns:
            Tuple[List[TaggedObject], int]: A tuple containing:
                - The requested page of matching objects
                - Total count of matching objects (for pagination)
        """
        pass
