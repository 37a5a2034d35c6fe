# tests/database/test_tag_store.py
from __future__ import annotations

import threading

import pytest

from tagserver.database.core.main import build_engine, build_session_factory
from tagserver.database.repos.tag_store import SqlAlchemyTagStore
from tagserver.domain.entities.tag import Tag
from tagserver.domain.errors import StoreUnavailable


def test_ids_start_at_one_and_are_monotonic(store):
    first, created = store.insert_tag_if_absent("食品")
    second, _ = store.insert_tag_if_absent("food")
    assert (first, created) == (1, True)
    assert second == 2


def test_duplicate_name_returns_existing_id(store):
    tag_id, _ = store.insert_tag_if_absent("food")
    assert store.insert_tag_if_absent("food") == (tag_id, False)
    assert store.find_tag_by_name("food") == Tag(id=tag_id, name="food")


def test_lookups_return_domain_entities_or_none(store):
    tag_id, _ = store.insert_tag_if_absent("food")

    assert store.find_tag_by_id(tag_id) == Tag(id=tag_id, name="food")
    assert store.find_tag_by_id(tag_id + 1) is None
    assert store.find_tag_by_name("nope") is None
    assert store.find_link(1, tag_id) is None


def test_links_round_trip(store):
    a, _ = store.insert_tag_if_absent("a")
    b, _ = store.insert_tag_if_absent("b")

    l1, c1 = store.insert_link_if_absent(10, b)
    l2, c2 = store.insert_link_if_absent(10, a)
    assert c1 and c2
    assert store.insert_link_if_absent(10, b) == (l1, False)

    link = store.find_link(10, a)
    assert link is not None and (link.id, link.entity_id, link.tag_id) == (l2, 10, a)

    links = store.list_links_by_entity(10)
    assert [l.tag_id for l in links] == [b, a]

    tags = store.find_tags_by_ids({a, b})
    assert sorted(t.name for t in tags) == ["a", "b"]


def test_concurrent_duplicate_creates_resolve_to_one_row(store):
    results = []
    errors = []
    start = threading.Barrier(8)

    def _create():
        try:
            start.wait()
            results.append(store.insert_tag_if_absent("race"))
        except Exception as e:  # surfaced below
            errors.append(e)

    threads = [threading.Thread(target=_create) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len({tag_id for tag_id, _ in results}) == 1
    assert sum(1 for _, created in results if created) == 1


def test_concurrent_duplicate_links_resolve_to_one_row(store):
    tag_id, _ = store.insert_tag_if_absent("food")
    results = []
    errors = []
    start = threading.Barrier(8)

    def _link():
        try:
            start.wait()
            results.append(store.insert_link_if_absent(1, tag_id))
        except Exception as e:  # surfaced below
            errors.append(e)

    threads = [threading.Thread(target=_link) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(results) == 8
    assert len({link_id for link_id, _ in results}) == 1
    assert sum(1 for _, created in results if created) == 1
    assert [l.tag_id for l in store.list_links_by_entity(1)] == [tag_id]


def test_backend_errors_become_store_unavailable(tmp_path):
    # a database without the schema: every statement fails
    engine = build_engine(url=f"sqlite:///{tmp_path / 'empty.db'}")
    broken = SqlAlchemyTagStore(build_session_factory(engine))
    try:
        with pytest.raises(StoreUnavailable):
            broken.find_tag_by_name("food")
        with pytest.raises(StoreUnavailable):
            broken.insert_link_if_absent(1, 1)
        assert broken.ping() is True  # the connection itself is fine
    finally:
        engine.dispose()


def test_ping(store):
    assert store.ping() is True
