# tagserver/domain/entities/links/entity_tag_link.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EntityTagLink:
    """
    Join entity connecting an external entity id and a Tag.
    The DB enforces that (entity_id, tag_id) is unique; link ids grow with creation order.
    """
    id: int
    entity_id: int
    tag_id: int
