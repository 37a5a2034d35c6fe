from __future__ import annotations
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tagserver.common.logging import get_logger
from tagserver.database.core.main import session_scope
from tagserver.database.repos._mapping import to_domain_link, to_domain_tag
from tagserver.database.repos.tag_repo import TagRepo
from tagserver.domain.entities.links.entity_tag_link import EntityTagLink
from tagserver.domain.entities.tag import Tag
from tagserver.domain.errors import StoreUnavailable

T = TypeVar("T")

logger = get_logger(__name__)


class SqlAlchemyTagStore:
    """
    TagStorePort backed by SQLAlchemy. Each call runs in its own short transaction
    (commit on success, rollback on error), so a returned id is always committed.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def _run(self, op: str, fn: Callable[[TagRepo], T]) -> T:
        try:
            with session_scope(self._session_factory) as db:
                return fn(TagRepo(db))
        except SQLAlchemyError as exc:
            logger.error("store %s failed: %s", op, exc)
            raise StoreUnavailable(f"{op}: {exc.__class__.__name__}") from exc

    # ----- tags -----
    def find_tag_by_name(self, name: str) -> Optional[Tag]:
        def _q(repo: TagRepo) -> Optional[Tag]:
            row = repo.get_by_name(name)
            return to_domain_tag(row) if row else None
        return self._run("find_tag_by_name", _q)

    def insert_tag_if_absent(self, name: str) -> Tuple[int, bool]:
        return self._run("insert_tag_if_absent", lambda repo: repo.insert_if_absent(name))

    def find_tag_by_id(self, tag_id: int) -> Optional[Tag]:
        def _q(repo: TagRepo) -> Optional[Tag]:
            row = repo.get(tag_id)
            return to_domain_tag(row) if row else None
        return self._run("find_tag_by_id", _q)

    def find_tags_by_ids(self, ids: Iterable[int]) -> List[Tag]:
        id_list = list(ids)
        return self._run("find_tags_by_ids", lambda repo: [to_domain_tag(r) for r in repo.get_many(id_list)])

    # ----- links -----
    def find_link(self, entity_id: int, tag_id: int) -> Optional[EntityTagLink]:
        def _q(repo: TagRepo) -> Optional[EntityTagLink]:
            row = repo.get_link(entity_id, tag_id)
            return to_domain_link(row) if row else None
        return self._run("find_link", _q)

    def insert_link_if_absent(self, entity_id: int, tag_id: int) -> Tuple[int, bool]:
        return self._run(
            "insert_link_if_absent",
            lambda repo: repo.insert_link_if_absent(entity_id, tag_id),
        )

    def list_links_by_entity(self, entity_id: int) -> List[EntityTagLink]:
        return self._run(
            "list_links_by_entity",
            lambda repo: [to_domain_link(r) for r in repo.list_links_for_entity(entity_id)],
        )

    # ----- health -----
    def ping(self) -> bool:
        try:
            with session_scope(self._session_factory) as db:
                db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.warning("store ping failed: %s", exc)
            return False
