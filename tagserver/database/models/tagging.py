# tagserver/database/models/tagging.py
from __future__ import annotations

from typing import List

from sqlalchemy import BigInteger, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tagserver.database.core.main import Base
from tagserver.database.core.service_object import ServiceObject, IdType


# =======================
# Tags
# =======================
class Tag(ServiceObject, Base):
    __tablename__ = "tag"
    __table_args__ = (
        UniqueConstraint("name", name="uq_tag_name"),
        {"sqlite_autoincrement": True},
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    links: Mapped[List["EntityTag"]] = relationship(back_populates="tag")


# =======================
# Entity <-> Tag links
# =======================
class EntityTag(ServiceObject, Base):
    __tablename__ = "entity_tag"
    __table_args__ = (
        UniqueConstraint("entity_id", "tag_id", name="uq_entity_tag_entity_tag"),
        Index("ix_entity_tag_entity_id", "entity_id"),
        {"sqlite_autoincrement": True},
    )

    entity_id: Mapped[int] = mapped_column(BigInteger, nullable=False)   # opaque, caller-defined
    tag_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("tag.id", ondelete="RESTRICT"),
        nullable=False,
    )

    tag: Mapped["Tag"] = relationship(back_populates="links")
