"""Tag audit log domain entities.

Log entries are the durable evidence trail of taxonomy maintenance. They are
written once per structural operation and never modified.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class TagLogAction(Enum):
    """Actions recorded in the tag audit log."""

    OBJECTS_MOVED = "objects_moved"
    OBJECTS_COPIED = "objects_copied"


@dataclass(frozen=True)
class TagLogEntity:
    """Domain entity representing one audit log entry.

    Attributes:
        id (Optional[int]): Identity, None until appended.
        tag_id (int): Tag the change is attributed to (the destination tag).
        action (TagLogAction): What happened.
        payload (Dict[str, Any]): Structured description of the change.
        actor_id (int): User who performed the change.
        timestamp (Optional[datetime]): When the change happened.
    """

    id: Optional[int]
    tag_id: int
    action: TagLogAction
    payload: Dict[str, Any] = field(default_factory=dict)
    actor_id: int = 0
    timestamp: Optional[datetime] = None

    @property
    def affected_count(self) -> int:
        """Number of associations the logged operation touched."""
        return len(self.payload.get("entries", []))
