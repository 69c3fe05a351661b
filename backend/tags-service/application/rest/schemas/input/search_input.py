"""Search input schemas for the tags service.

This module contains Pydantic models for search request input validation.
"""

import re
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

TAG_SEPARATORS = re.compile(r"(?:%20|[\s,+])+")


class TagSearchRequest(BaseModel):
    """Pydantic model for tag search request input.

    Attributes:
        tags: Comma-separated tag IDs; objects must carry all of them
        scope: Restrict results to one scope (optional)
        sort: Result ordering, "date" or "scope"
        page: Page number for pagination (1-based)
        limit: Number of results per page
    """

    tags: str = Field(..., description="Comma-separated tag IDs")
    scope: Optional[str] = Field(default=None, description="Scope to list")
    sort: str = Field(default="date", description="Result ordering")
    page: int = Field(default=1, ge=1, description="Page number for pagination (1-based)")
    limit: int = Field(default=25, ge=1, description="Number of results per page")

    @field_validator("sort")
    @classmethod
    def validate_sort(cls, v):
        """Validate the sort parameter."""
        allowed = {"date", "scope"}
        if v not in allowed:
            raise ValueError(f'Sort must be one of: {", ".join(sorted(allowed))}')
        return v

    def get_tag_ids(self) -> List[int]:
        """Parse and return tag IDs from the tags string.

        Commas, spaces, "+" and "%20" all separate IDs, so "3+7" and
        "3 7" mean the same as "3,7".

        Raises:
            ValueError: If any tag ID is not an integer
        """
        try:
            return [int(tag_id) for tag_id in TAG_SEPARATORS.split(self.tags) if tag_id]
        except ValueError as e:
            raise ValueError(f"Invalid tag ID list: {self.tags}") from e
