# tests/database/test_tag_repo.py
from tagserver.database.models.tagging import Tag, EntityTag
from tagserver.database.repos.tag_repo import TagRepo


def test_insert_if_absent_creates_then_coalesces(db):
    repo = TagRepo(db)

    tag_id, created = repo.insert_if_absent("food")
    assert created is True
    assert tag_id >= 1

    again_id, created_again = repo.insert_if_absent("food")
    assert created_again is False
    assert again_id == tag_id

    rows = db.query(Tag).filter(Tag.name == "food").all()
    assert len(rows) == 1


def test_get_by_name_and_get(db):
    repo = TagRepo(db)
    tag_id, _ = repo.insert_if_absent("food street")

    by_name = repo.get_by_name("food street")
    assert by_name is not None and by_name.id == tag_id

    by_id = repo.get(tag_id)
    assert by_id is not None and by_id.name == "food street"

    assert repo.get_by_name("street food") is None
    assert repo.get(tag_id + 1000) is None


def test_get_many_ignores_unknown_ids(db):
    repo = TagRepo(db)
    a, _ = repo.insert_if_absent("alpha")
    b, _ = repo.insert_if_absent("beta")

    rows = repo.get_many([b, a, a, 99999])
    assert sorted(r.id for r in rows) == sorted([a, b])
    assert repo.get_many([]) == []


def test_link_insert_is_idempotent(db):
    repo = TagRepo(db)
    tag_id, _ = repo.insert_if_absent("food")

    link_id, created = repo.insert_link_if_absent(7, tag_id)
    assert created is True

    link_id2, created2 = repo.insert_link_if_absent(7, tag_id)
    assert created2 is False
    assert link_id2 == link_id

    assert db.query(EntityTag).filter(EntityTag.entity_id == 7).count() == 1
    found = repo.get_link(7, tag_id)
    assert found is not None and found.id == link_id
    assert repo.get_link(8, tag_id) is None


def test_list_links_for_entity_in_creation_order(db):
    repo = TagRepo(db)
    ids = [repo.insert_if_absent(n)[0] for n in ("c", "a", "b")]

    # link in an order unrelated to tag ids
    for tid in (ids[2], ids[0], ids[1]):
        repo.insert_link_if_absent(1, tid)
    repo.insert_link_if_absent(2, ids[0])

    links = repo.list_links_for_entity(1)
    assert [l.tag_id for l in links] == [ids[2], ids[0], ids[1]]
    assert [l.id for l in links] == sorted(l.id for l in links)
    assert repo.list_links_for_entity(3) == []
