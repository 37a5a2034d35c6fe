from __future__ import annotations
from typing import Iterable, List, Optional, Protocol, Tuple

from tagserver.domain.entities.tag import Tag
from tagserver.domain.entities.links.entity_tag_link import EntityTagLink


class TagStorePort(Protocol):
    """System of record for tags and entity-tag links. Raises StoreUnavailable on backend failure."""

    def find_tag_by_name(self, name: str) -> Optional[Tag]: ...

    def insert_tag_if_absent(self, name: str) -> Tuple[int, bool]: ...  # (tag_id, was_created)

    def find_tag_by_id(self, tag_id: int) -> Optional[Tag]: ...

    def find_link(self, entity_id: int, tag_id: int) -> Optional[EntityTagLink]: ...

    def insert_link_if_absent(self, entity_id: int, tag_id: int) -> Tuple[int, bool]: ...  # (link_id, was_created)

    def list_links_by_entity(self, entity_id: int) -> List[EntityTagLink]: ...  # creation order

    def find_tags_by_ids(self, ids: Iterable[int]) -> List[Tag]: ...  # unordered

    def ping(self) -> bool: ...
