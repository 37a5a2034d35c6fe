# tests/services/conftest.py
from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Tuple

import pytest
from starlette.testclient import TestClient

from tagserver.common.concurrency.thread_manager import ThreadManager
from tagserver.domain.entities.tag import Tag
from tagserver.domain.entities.links.entity_tag_link import EntityTagLink
from tagserver.domain.errors import SearchBackendUnavailable
from tagserver.services.api.app import create_app
from tagserver.services.tags.publisher import IndexPublisher
from tagserver.services.tags.service import TagService


class InMemoryTagStore:
    """
    TagStorePort fake. A lock stands in for the unique constraints.
    `hide_names` makes find_tag_by_name miss, which is what a caller sees when
    another request inserts the same name between its check and its insert.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.tags: Dict[int, Tag] = {}
        self.links: Dict[int, EntityTagLink] = {}
        self.calls: List[str] = []
        self.hide_names = False

    def find_tag_by_name(self, name: str) -> Optional[Tag]:
        self.calls.append("find_tag_by_name")
        if self.hide_names:
            return None
        with self._lock:
            return next((t for t in self.tags.values() if t.name == name), None)

    def insert_tag_if_absent(self, name: str) -> Tuple[int, bool]:
        self.calls.append("insert_tag_if_absent")
        with self._lock:
            for t in self.tags.values():
                if t.name == name:
                    return t.id, False
            tag = Tag(id=len(self.tags) + 1, name=name)
            self.tags[tag.id] = tag
            return tag.id, True

    def find_tag_by_id(self, tag_id: int) -> Optional[Tag]:
        self.calls.append("find_tag_by_id")
        return self.tags.get(tag_id)

    def find_link(self, entity_id: int, tag_id: int) -> Optional[EntityTagLink]:
        self.calls.append("find_link")
        with self._lock:
            return next(
                (l for l in self.links.values() if (l.entity_id, l.tag_id) == (entity_id, tag_id)),
                None,
            )

    def insert_link_if_absent(self, entity_id: int, tag_id: int) -> Tuple[int, bool]:
        self.calls.append("insert_link_if_absent")
        with self._lock:
            for l in self.links.values():
                if (l.entity_id, l.tag_id) == (entity_id, tag_id):
                    return l.id, False
            link = EntityTagLink(id=len(self.links) + 1, entity_id=entity_id, tag_id=tag_id)
            self.links[link.id] = link
            return link.id, True

    def list_links_by_entity(self, entity_id: int) -> List[EntityTagLink]:
        self.calls.append("list_links_by_entity")
        return sorted((l for l in self.links.values() if l.entity_id == entity_id), key=lambda l: l.id)

    def find_tags_by_ids(self, ids: Iterable[int]) -> List[Tag]:
        self.calls.append("find_tags_by_ids")
        # deliberately not in id or link order
        found = [self.tags[i] for i in set(ids) if i in self.tags]
        return sorted(found, key=lambda t: t.name, reverse=True)

    def ping(self) -> bool:
        return True


class FakeTagIndex:
    """
    TagSearchPort fake: a name matches when it starts with the keyword (case-insensitive).
    `gate` blocks upserts until set; `fail_upserts`/`fail_search` raise backend errors.
    """

    def __init__(self) -> None:
        self.docs: Dict[int, str] = {}
        self.upserts: List[Tuple[int, str]] = []
        self.gate: Optional[threading.Event] = None
        self.fail_upserts = False
        self.fail_search = False

    def upsert_tag_document(self, tag_id: int, name: str) -> None:
        if self.gate is not None:
            self.gate.wait(5)
        self.upserts.append((tag_id, name))
        if self.fail_upserts:
            raise SearchBackendUnavailable("index down")
        self.docs[tag_id] = name

    def prefix_search(self, keyword: str) -> List[Tag]:
        if self.fail_search:
            raise SearchBackendUnavailable("index down")
        kw = keyword.lower()
        return [Tag(i, n) for i, n in sorted(self.docs.items()) if n.lower().startswith(kw)]

    def ping(self) -> bool:
        return not self.fail_search


@pytest.fixture()
def fake_store() -> InMemoryTagStore:
    return InMemoryTagStore()


@pytest.fixture()
def fake_index() -> FakeTagIndex:
    return FakeTagIndex()


@pytest.fixture()
def publisher(fake_index):
    pub = IndexPublisher(fake_index, ThreadManager(name="test-publisher", max_workers=2, max_queue=16))
    try:
        yield pub
    finally:
        if fake_index.gate is not None:
            fake_index.gate.set()
        pub.shutdown(wait=True)


@pytest.fixture()
def tag_service(fake_store, fake_index, publisher) -> TagService:
    return TagService(fake_store, fake_index, publisher=publisher, max_name_length=32)


@pytest.fixture()
def api_client(tag_service):
    """TestClient over an app wired to the fake-backed TagService."""
    app = create_app(service=tag_service)
    with TestClient(app) as client:
        yield client
