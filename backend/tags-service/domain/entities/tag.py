"""Tag domain entity.

Tags are referenced by associations through their integer id only; the
entity here carries the attributes shown to people browsing the taxonomy.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TagEntity:
    """A tag of the taxonomy.

    Attributes:
        id (Optional[int]): Identity, None until persisted.
        name (str): Display name, unique ignoring case.
        description (str): Free-text description.
        usage_count (int): Number of associations referencing the tag when it
            was read. Informational only; never written back.

    Example:
        >>> TagEntity(id=None, name="  Quantum Dots ").name
        'Quantum Dots'
    """

    id: Optional[int]
    name: str
    description: str = ""
    usage_count: int = 0

    def __post_init__(self) -> None:
        """Normalize whitespace and reject blank names.

        Raises:
            ValueError: If the name is empty or whitespace only.
        """
        if not self.name or not self.name.strip():
            raise ValueError("Tag name cannot be empty or whitespace")

        object.__setattr__(self, "name", self.name.strip())
        object.__setattr__(self, "description", (self.description or "").strip())

    def is_new(self) -> bool:
        return self.id is None

    def has_name(self, name: str) -> bool:
        """Compare names the way uniqueness is enforced (case-insensitive)."""
        return self.name.casefold() == (name or "").strip().casefold()

    def is_unused(self) -> bool:
        return self.usage_count == 0
