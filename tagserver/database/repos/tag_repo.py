from __future__ import annotations
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select, update, and_, func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from tagserver.database.models.tagging import Tag, EntityTag

# Dialects with INSERT .. ON CONFLICT DO NOTHING .. RETURNING
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class TagRepo:
    """
    Row-level access to tags and entity links within one Session.
    Transactions belong to the caller.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _insert(self, model):
        dialect = self.db.get_bind().dialect.name
        try:
            return _UPSERT_INSERTS[dialect](model)
        except KeyError:
            raise NotImplementedError(f"upsert not supported for dialect {dialect!r}") from None

    # ----- tags -----
    def get_by_name(self, name: str) -> Optional[Tag]:
        stmt = select(Tag).where(Tag.name == name).limit(1)
        return self.db.execute(stmt).scalars().first()

    def get(self, tag_id: int) -> Optional[Tag]:
        return self.db.get(Tag, tag_id)

    def get_many(self, tag_ids: Iterable[int]) -> List[Tag]:
        ids = list(set(tag_ids))
        if not ids:
            return []
        stmt = select(Tag).where(Tag.id.in_(ids))
        return list(self.db.execute(stmt).scalars().all())

    def insert_if_absent(self, name: str) -> Tuple[int, bool]:
        """
        Insert a tag; a duplicate name coalesces onto the existing row
        (its last_updated is refreshed) instead of failing.
        """
        stmt = (
            self._insert(Tag)
            .values(name=name)
            .on_conflict_do_nothing(index_elements=["name"])
            .returning(Tag.id)
        )
        new_id = self.db.execute(stmt).scalar_one_or_none()
        if new_id is not None:
            return int(new_id), True

        existing_id = self.db.execute(select(Tag.id).where(Tag.name == name)).scalar_one()
        self._touch(Tag, existing_id)
        return int(existing_id), False

    # ----- entity links -----
    def get_link(self, entity_id: int, tag_id: int) -> Optional[EntityTag]:
        stmt = select(EntityTag).where(
            and_(EntityTag.entity_id == entity_id, EntityTag.tag_id == tag_id)
        ).limit(1)
        return self.db.execute(stmt).scalars().first()

    def insert_link_if_absent(self, entity_id: int, tag_id: int) -> Tuple[int, bool]:
        # uniqueness enforced by uq_entity_tag_entity_tag; a racing duplicate resolves to the existing row
        stmt = (
            self._insert(EntityTag)
            .values(entity_id=entity_id, tag_id=tag_id)
            .on_conflict_do_nothing(index_elements=["entity_id", "tag_id"])
            .returning(EntityTag.id)
        )
        new_id = self.db.execute(stmt).scalar_one_or_none()
        if new_id is not None:
            return int(new_id), True

        existing_id = self.db.execute(
            select(EntityTag.id).where(
                and_(EntityTag.entity_id == entity_id, EntityTag.tag_id == tag_id)
            )
        ).scalar_one()
        self._touch(EntityTag, existing_id)
        return int(existing_id), False

    def list_links_for_entity(self, entity_id: int) -> List[EntityTag]:
        stmt = (
            select(EntityTag)
            .where(EntityTag.entity_id == entity_id)
            .order_by(EntityTag.id.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    # ----- helpers -----
    def _touch(self, model, row_id: int) -> None:
        self.db.execute(
            update(model).where(model.id == row_id).values(last_updated=func.now()),
            execution_options={"synchronize_session": False},
        )
