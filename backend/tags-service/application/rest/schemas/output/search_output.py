"""Search output schemas for the tags service.

This module contains Pydantic models for search response output serialization.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class PaginationInfo(BaseModel):
    """Pagination metadata for list responses."""

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next: bool
    has_previous: bool

    @classmethod
    def from_entity(cls, pagination) -> "PaginationInfo":
        return cls(
            current_page=pagination.current_page,
            total_pages=pagination.total_pages,
            total_items=pagination.total_items,
            items_per_page=pagination.items_per_page,
            has_next=pagination.has_next,
            has_previous=pagination.has_previous,
        )


class CategoryResponse(BaseModel):
    """Number of matching objects in one scope."""

    scope: str
    total: int


class TaggedObjectResponse(BaseModel):
    """One matching object."""

    scope: str
    object_id: int
    last_tagged_on: Optional[datetime] = None


class TagSearchResponse(BaseModel):
    """Response model for tag searches.

    Attributes:
        tag_ids: Tags every result carries
        scope: Scope filter applied to ``items`` (None for all)
        total: Matching objects across all scopes
        categories: Per-scope totals
        items: Requested page of matching objects
        pagination: Pagination information for ``items``
        search_timestamp: When the search was performed
    """

    tag_ids: List[int]
    scope: Optional[str] = None
    total: int
    categories: List[CategoryResponse]
    items: List[TaggedObjectResponse]
    pagination: PaginationInfo
    search_timestamp: datetime

    @classmethod
    def from_entity(cls, search_result) -> "TagSearchResponse":
        """Convert domain TagSearchResult to API response.

        Args:
            search_result: Domain search result entity.

        Returns:
            TagSearchResponse: Complete search response with metadata.
        """
        return cls(
            tag_ids=search_result.criteria.tag_ids,
            scope=search_result.criteria.scope,
            total=search_result.total,
            categories=[
                CategoryResponse(scope=category.scope, total=category.total)
                for category in search_result.categories
            ],
            items=[
                TaggedObjectResponse(
                    scope=item.scope,
                    object_id=item.object_id,
                    last_tagged_on=item.last_tagged_on,
                )
                for item in search_result.items
            ],
            pagination=PaginationInfo.from_entity(search_result.pagination),
            search_timestamp=search_result.search_timestamp,
        )
