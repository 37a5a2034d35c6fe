from __future__ import annotations
from typing import List, Protocol

from tagserver.domain.entities.tag import Tag


class TagSearchPort(Protocol):
    """Eventually consistent mirror of tag names. Raises SearchBackendUnavailable on backend failure."""

    def upsert_tag_document(self, tag_id: int, name: str) -> None: ...

    def prefix_search(self, keyword: str) -> List[Tag]: ...  # index relevance order

    def ping(self) -> bool: ...
