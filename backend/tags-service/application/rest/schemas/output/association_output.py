"""Association output schemas for API responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class AssociationResponse(BaseModel):
    """Schema for a tag/object association in API responses.

    Attributes:
        id (int): Identifier of the association.
        scope (str): Scope of the tagged object.
        object_id (int): Identifier of the object inside its scope.
        tag_id (int): Identifier of the tag.
        tagger_id (int): User who tagged the object.
        label (str): Qualifier of the relationship.
        tagged_on (Optional[datetime]): When the object was tagged.
        created (bool): Whether the request created the association.
    """

    id: int
    scope: str
    object_id: int
    tag_id: int
    tagger_id: int
    label: str
    tagged_on: Optional[datetime] = None
    created: bool = False


class UntagResponse(BaseModel):
    """Schema for untag results."""

    removed: int
