"""Search domain service for the tags service.

This module contains the TagSearchService that answers "which objects carry
these tags" queries, following Domain-Driven Design principles.
"""

import logging
from typing import TYPE_CHECKING, Optional

from domain.entities.search import PaginationMetadata, TagSearchCriteria, TagSearchResult
from domain.repositories.search_repository import SearchRepository
from domain.services.context import Clock, SystemClock

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class TagSearchService:
    """Domain service for browsing tagged objects.

    The service is read-only. It returns per-scope totals (for category
    navigation) together with one page of matching objects.
    """

    def __init__(self, search_repository: SearchRepository, clock: Optional[Clock] = None):
        """Initialize the search service with dependencies.

        Args:
            search_repository (SearchRepository): Repository for performing search operations.
            clock (Optional[Clock]): Time source for the search timestamp.
        """
        self._search_repository = search_repository
        self._clock = clock or SystemClock()

    async def search(
        self, db_session: "Session", criteria: TagSearchCriteria
    ) -> TagSearchResult:
        """Search for objects carrying every tag in the criteria.

        Category totals ignore ``criteria.scope`` so callers can show every
        scope that has results while listing only one.

        Args:
            db_session (Session): SQLAlchemy database session for this operation.
            criteria (TagSearchCriteria): The search criteria.

        Returns:
            TagSearchResult: Per-scope totals, the requested page and pagination info.
        """
        logger.info(
            f"Searching objects tagged {criteria.tag_ids}"
            + (f" in scope '{criteria.scope}'" if criteria.scope else "")
        )

        categories = await self._search_repository.count_by_scope(
            db_session, criteria.tag_ids
        )
        items, total_count = await self._search_repository.search_objects(
            db_session, criteria
        )

        pagination = PaginationMetadata.calculate(
            current_page=criteria.page,
            total_items=total_count,
            items_per_page=criteria.limit,
        )

        return TagSearchResult(
            categories=categories,
            items=items,
            pagination=pagination,
            criteria=criteria,
            search_timestamp=self._clock.now(),
        )
