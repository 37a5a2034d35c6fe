# tagserver/database/repos/_mapping.py
from __future__ import annotations
from tagserver.database.models.tagging import Tag as DBTag, EntityTag as DBEntityTag
from tagserver.domain.entities.tag import Tag as DomainTag
from tagserver.domain.entities.links.entity_tag_link import EntityTagLink


def to_domain_tag(row: DBTag) -> DomainTag:
    return DomainTag(id=row.id, name=row.name)


def to_domain_link(row: DBEntityTag) -> EntityTagLink:
    return EntityTagLink(id=row.id, entity_id=row.entity_id, tag_id=row.tag_id)
