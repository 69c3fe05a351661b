"""Tag output schemas for API responses.

This module contains Pydantic models for tag-related API responses.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class TagResponse(BaseModel):
    """Schema for tag data in API responses.

    Attributes:
        id (int): Identifier of the tag.
        name (str): The name of the tag.
        description (str): Description of the tag.
        usage_count (int): Number of objects carrying the tag.

    Example:
        >>> tag_response = TagResponse(id=3, name="physics", description="")
    """

    id: int
    name: str
    description: str = ""
    usage_count: int = 0


class TagOperationResponse(BaseModel):
    """Schema for merge and copy results.

    Attributes:
        success (bool): Whether the operation ran.
        action (str): "objects_moved" or "objects_copied".
        source_tag_id (int): Tag the associations came from.
        target_tag_id (int): Tag the associations went to.
        target_tag_name (str): Name of the target tag.
        warnings (List[str]): Rows that were skipped, with the reason.
    """

    success: bool
    action: str
    source_tag_id: int
    target_tag_id: int
    target_tag_name: str = ""
    warnings: List[str] = []


class TagLogResponse(BaseModel):
    """Schema for one audit log entry.

    Attributes:
        id (int): Identifier of the entry.
        tag_id (int): Tag the change is attributed to.
        action (str): What happened.
        payload (Dict[str, Any]): Structured description of the change.
        affected_count (int): Associations listed in the payload.
        actor_id (int): User who performed the change.
        timestamp (Optional[datetime]): When it happened.
    """

    id: int
    tag_id: int
    action: str
    payload: Dict[str, Any]
    affected_count: int = 0
    actor_id: int
    timestamp: Optional[datetime] = None
