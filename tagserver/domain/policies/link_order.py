# tagserver/domain/policies/link_order.py
from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from tagserver.domain.entities.tag import Tag
from tagserver.domain.entities.links.entity_tag_link import EntityTagLink


def order_tags_by_links(
    links: Sequence[EntityTagLink],
    tags: Iterable[Tag],
) -> Tuple[List[Tag], List[int]]:
    """
    Re-project a batch of fetched tags onto the order of `links`.

    Returns (ordered_tags, missing_tag_ids). Tags that no link points at are
    ignored; linked tag ids absent from `tags` are reported in link order.
    """
    position: Dict[int, int] = {}
    for idx, link in enumerate(links):
        position.setdefault(link.tag_id, idx)

    known = [t for t in tags if t.id in position]
    known.sort(key=lambda t: position[t.id])  # list.sort is stable

    fetched = {t.id for t in known}
    missing = [link.tag_id for link in links if link.tag_id not in fetched]
    return known, missing
