# tagserver/domain/entities/tag.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Tag:
    """
    A reusable named tag. The id is assigned by the store and never reused;
    the name is trimmed, non-empty and unique across all tags.
    """
    id: int
    name: str

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("tag name is required")

    def as_dict(self) -> dict:
        """Search document body."""
        return {"tag_id": self.id, "name": self.name}
