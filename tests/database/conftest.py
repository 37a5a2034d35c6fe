# tests/database/conftest.py
from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from tagserver.database.core.main import build_session_factory
from tagserver.database.repos.tag_store import SqlAlchemyTagStore


@pytest.fixture()
def db(clean_engine) -> Session:
    """
    Per-test SQLAlchemy Session bound to a transaction (rolled back after each test).
    """
    connection = clean_engine.connect()
    trans = connection.begin()

    session = Session(bind=connection, future=True)
    try:
        yield session
    finally:
        session.close()
        trans.rollback()
        connection.close()


@pytest.fixture()
def store(clean_engine) -> SqlAlchemyTagStore:
    """Store adapter committing through its own sessions."""
    return SqlAlchemyTagStore(build_session_factory(clean_engine))
