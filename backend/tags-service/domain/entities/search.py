"""Search domain entities for the tags service.

This module contains the domain entities for browsing tagged objects: the
search criteria, per-scope totals, and paginated results.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional


class SearchSort(Enum):
    """Enumeration for result orderings."""

    DATE = "date"
    SCOPE = "scope"


@dataclass
class TagSearchCriteria:
    """Domain entity representing criteria for browsing tagged objects.

    An object matches when it carries every tag in ``tag_ids`` within the
    same scope.

    Attributes:
        tag_ids: Tag identifiers the objects must all carry
        scope: Restrict results to one scope (optional)
        sort: Result ordering
        page: Page number for pagination (1-based)
        limit: Number of results per page
    """

    tag_ids: List[int]
    scope: Optional[str] = None
    sort: SearchSort = SearchSort.DATE
    page: int = 1
    limit: int = 25
    max_limit: int = 100

    def __post_init__(self):
        """Validate search criteria after initialization."""
        if not self.tag_ids:
            raise ValueError("At least one tag must be provided")
        if any(tag_id <= 0 for tag_id in self.tag_ids):
            raise ValueError("Tag IDs must be positive integers")
        if self.page < 1:
            raise ValueError("Page number must be at least 1")
        if self.limit < 1 or self.limit > self.max_limit:
            raise ValueError(f"Limit must be between 1 and {self.max_limit}")

        # Duplicates would break the "carries every tag" count
        self.tag_ids = sorted(set(self.tag_ids))
        if self.scope is not None:
            self.scope = self.scope.strip() or None

    @property
    def offset(self) -> int:
        """Calculate the offset for database pagination."""
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class ScopeTotal:
    """Number of matching objects inside one scope."""

    scope: str
    total: int


@dataclass(frozen=True)
class TaggedObject:
    """An object matching the search, identified by scope and id.

    Attributes:
        scope: Scope of the object
        object_id: Identifier of the object inside its scope
        last_tagged_on: Most recent tagging time among the requested tags
    """

    scope: str
    object_id: int
    last_tagged_on: Optional[datetime]


@dataclass
class PaginationMetadata:
    """Domain entity representing pagination information for search results.

    Attributes:
        current_page: Current page number
        total_pages: Total number of pages
        total_items: Total number of items found
        items_per_page: Number of items per page
        has_next: Whether there is a next page
        has_previous: Whether there is a previous page
    """

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next: bool
    has_previous: bool

    @classmethod
    def calculate(
        cls, current_page: int, total_items: int, items_per_page: int
    ) -> "PaginationMetadata":
        """Calculate pagination metadata from basic parameters.

        Args:
            current_page: The current page number (1-based)
            total_items: Total number of items found
            items_per_page: Number of items per page

        Returns:
            PaginationMetadata: Calculated pagination information
        """
        total_pages = (
            (total_items + items_per_page - 1) // items_per_page
            if total_items > 0
            else 1
        )
        return cls(
            current_page=current_page,
            total_pages=total_pages,
            total_items=total_items,
            items_per_page=items_per_page,
            has_next=current_page < total_pages,
            has_previous=current_page > 1,
        )


@dataclass
class TagSearchResult:
    """Result of browsing tagged objects.

    Attributes:
        categories: Per-scope totals, ignoring the scope filter
        items: The requested page of matching objects
        pagination: Pagination metadata for ``items``
        criteria: The criteria that produced these results
        search_timestamp: When the search was performed
    """

    categories: List[ScopeTotal]
    items: List[TaggedObject]
    pagination: PaginationMetadata
    criteria: TagSearchCriteria
    search_timestamp: datetime

    @property
    def total(self) -> int:
        """Total matching objects across all scopes."""
        return sum(category.total for category in self.categories)

    def is_empty(self) -> bool:
        """Check if the search result is empty."""
        return len(self.items) == 0
