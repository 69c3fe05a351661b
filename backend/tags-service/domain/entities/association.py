"""Association domain entity.

An association links one tag to one object. Objects are not modelled by this
service; they are identified by a scope (the table or content type they live
in) and an integer id inside that scope.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple


class AssociationValidationError(ValueError):
    """Exception raised when association fields violate validation rules."""

    pass


@dataclass(frozen=True)
class AssociationEntity:
    """Domain entity representing a tag attached to an object.

    Attributes:
        id (Optional[int]): Surrogate identity. None until persisted; never
            changes afterwards.
        scope (str): Domain/table of the tagged object (e.g. "resources").
        object_id (int): Identifier of the tagged object inside ``scope``.
        tag_id (int): Identifier of the tag.
        tagger_id (int): User who created the association.
        label (str): Qualifier of the relationship. The empty string is a
            valid label distinct from any other.
        tagged_on (Optional[datetime]): When the object was tagged.

    Business Rules:
        - scope must be non-empty
        - object_id and tag_id must be strictly positive integers
        - (scope, tag_id, object_id, label) identifies the logical
          association; merge and copy keep it unique

    Example:
        >>> assoc = AssociationEntity(id=None, scope="tickets", object_id=7, tag_id=3)
        >>> assoc.dedup_key()
        ('tickets', 3, 7, '')
    """

    id: Optional[int]
    scope: str
    object_id: int
    tag_id: int
    tagger_id: int = 0
    label: str = ""
    tagged_on: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate association fields.

        Raises:
            AssociationValidationError: If scope is empty or an id is not positive.
        """
        if self.scope is None or not str(self.scope).strip():
            raise AssociationValidationError("Association scope cannot be empty")

        for field_name in ("object_id", "tag_id"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise AssociationValidationError(
                    f"Association {field_name} must be a positive non-zero integer, got {value!r}"
                )

        object.__setattr__(self, "scope", str(self.scope).strip())
        object.__setattr__(self, "label", self.label if self.label is not None else "")
        object.__setattr__(self, "tagger_id", self.tagger_id or 0)

    def is_new(self) -> bool:
        """Check if this association has not been persisted yet."""
        return self.id is None

    def dedup_key(self) -> Tuple[str, int, int, str]:
        """Return the (scope, tag_id, object_id, label) tuple that must stay unique."""
        return (self.scope, self.tag_id, self.object_id, self.label)

    def with_tag(self, tag_id: int) -> "AssociationEntity":
        """Return the same association pointing at another tag (identity kept)."""
        return replace(self, tag_id=tag_id)

    def copy_for_tag(self, tag_id: int) -> "AssociationEntity":
        """Return a new, unsaved association for another tag.

        Scope, object, label, tagger and tagging time are carried over from
        this association; the identity is cleared so that persisting the copy
        creates a new row.
        """
        return replace(self, id=None, tag_id=tag_id)

    def to_snapshot(self) -> Dict[str, Any]:
        """Serialize the association state for audit log payloads.

        Returns:
            Dict[str, Any]: JSON-serializable representation of the association.
        """
        return {
            "id": self.id,
            "scope": self.scope,
            "object_id": self.object_id,
            "tag_id": self.tag_id,
            "tagger_id": self.tagger_id,
            "label": self.label,
            "tagged_on": self.tagged_on.isoformat() if self.tagged_on else None,
        }
