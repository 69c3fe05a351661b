"""Association input schemas for API requests."""

from pydantic import BaseModel, Field


class AssociationCreate(BaseModel):
    """Schema for tagging an object.

    Attributes:
        scope (str): Scope of the object (e.g. "resources", "tickets").
        object_id (int): Identifier of the object inside its scope.
        tag_id (int): Tag to attach.
        label (str): Optional qualifier of the relationship.

    Example:
        >>> AssociationCreate(scope="tickets", object_id=42, tag_id=3)
    """

    # Range checks are domain rules, reported as 400 by the router
    scope: str = Field(..., max_length=255, description="Scope of the tagged object")
    object_id: int = Field(..., description="Identifier of the object inside its scope")
    tag_id: int = Field(..., description="Tag to attach")
    label: str = Field(default="", max_length=255, description="Relationship label")
