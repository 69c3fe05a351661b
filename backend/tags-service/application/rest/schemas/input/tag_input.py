"""Request bodies of the tag registry and of the merge and copy endpoints."""

from typing import Optional

from pydantic import BaseModel, Field


class TagCreate(BaseModel):
    """Body of `POST /tags`.

    Blank names pass this schema and are rejected by `TagEntity` with a 400.

    Example:
        >>> TagCreate(name="quantum dots", description="Semiconductor nanocrystals")
    """

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    description: str = Field(default="", description="Free-text description")


class TagUpdate(TagCreate):
    """Body of `PUT /tags/{tag_id}`; an omitted description is left unchanged."""

    description: Optional[str] = Field(default=None, description="Free-text description")


class TagMergeRequest(BaseModel):
    """Schema for merging a tag into another tag.

    Attributes:
        target_tag_id (int): Tag receiving all associations of the merged tag.

    Example:
        >>> TagMergeRequest(target_tag_id=7)
    """

    target_tag_id: int = Field(..., description="Tag to merge into")


class TagCopyRequest(BaseModel):
    """Schema for copying a tag's associations to another tag.

    Attributes:
        target_tag_id (int): Tag receiving copies of the associations.
        scope (Optional[str]): Only copy associations in this scope.
    """

    target_tag_id: int = Field(..., description="Tag to copy associations to")
    scope: Optional[str] = Field(
        default=None, description="Restrict the copy to one object scope"
    )
