from __future__ import annotations

from typing import List, Optional

from tagserver.common.logging import get_logger
from tagserver.domain.entities.tag import Tag
from tagserver.domain.errors import InternalInconsistency, InvalidArgument, NotFound
from tagserver.domain.policies.link_order import order_tags_by_links
from tagserver.domain.ports.search_index import TagSearchPort
from tagserver.domain.ports.tag_store import TagStorePort
from tagserver.services.tags.publisher import IndexPublisher

logger = get_logger(__name__)

DEFAULT_MAX_NAME_LENGTH = 255


class TagService:
    """
    Orchestrates the relational store (system of record) and the search index
    (best-effort mirror) for the four tag operations.

    Consistency rules
    -----------------
    - Existence checks and link validation always hit the store.
    - The index is written only after the store committed a *new* tag, and only
      through the publisher, so index trouble never fails or slows a create.
    - Search is served by the index alone; there is no store fallback.
    """

    def __init__(
        self,
        store: TagStorePort,
        index: TagSearchPort,
        *,
        publisher: Optional[IndexPublisher] = None,
        max_name_length: int = DEFAULT_MAX_NAME_LENGTH,
    ) -> None:
        self.store = store
        self.index = index
        self.publisher = publisher or IndexPublisher(index)
        self.max_name_length = max_name_length

    # --- helpers -------------------------------------------------------------

    def _clean_name(self, name: Optional[str]) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidArgument("invalid name")
        if len(cleaned) > self.max_name_length:
            raise InvalidArgument(f"name longer than {self.max_name_length} characters")
        return cleaned

    @staticmethod
    def _require_id(value: int, label: str) -> int:
        if not value:
            raise InvalidArgument(f"invalid {label}")
        return int(value)

    # --- operations ----------------------------------------------------------

    def create_tag(self, name: str) -> int:
        """Get-or-create a tag by trimmed name. Returns the tag id."""
        tag_name = self._clean_name(name)

        existing = self.store.find_tag_by_name(tag_name)
        if existing is not None:
            return existing.id

        tag_id, created = self.store.insert_tag_if_absent(tag_name)
        if created:
            if not self.publisher.publish(tag_id, tag_name):
                logger.warning("tag %s not queued for indexing; search will miss it", tag_id)
        else:
            logger.debug("concurrent create of %r resolved to existing tag %s", tag_name, tag_id)
        return tag_id

    def search_tags(self, keyword: str) -> List[Tag]:
        """Prefix-phrase search served by the index, in the index's relevance order."""
        kw = (keyword or "").strip()
        if not kw:
            raise InvalidArgument("invalid keyword")
        return list(self.index.prefix_search(kw))

    def link_entity_tag(self, entity_id: int, tag_id: int) -> int:
        """Idempotently link a tag to an entity. Returns the link id."""
        entity_id = self._require_id(entity_id, "entity_id")
        tag_id = self._require_id(tag_id, "tag_id")

        link = self.store.find_link(entity_id, tag_id)
        if link is not None:
            return link.id

        if self.store.find_tag_by_id(tag_id) is None:
            raise NotFound("tag not found")

        link_id, _ = self.store.insert_link_if_absent(entity_id, tag_id)
        return link_id

    def list_entity_tags(self, entity_id: int) -> List[Tag]:
        """Tags linked to an entity, in link creation order."""
        entity_id = self._require_id(entity_id, "entity_id")

        links = self.store.list_links_by_entity(entity_id)
        if not links:
            return []

        tags = self.store.find_tags_by_ids({link.tag_id for link in links})
        ordered, missing = order_tags_by_links(links, tags)
        if missing:
            err = InternalInconsistency(entity_id, missing)
            logger.warning("dropping dangling links: %s", err)
        return ordered
