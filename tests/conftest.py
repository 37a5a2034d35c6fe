# tests/conftest.py
from __future__ import annotations

import pytest
from sqlalchemy.engine import Engine

from tagserver.common.settings import get_settings
from tagserver.database.core.main import build_engine
from tagserver.database.models import Base  # <-- imports the models/metadata


@pytest.fixture(scope="session")
def _database_url(tmp_path_factory):
    """
    SQLite file by default; a throwaway Postgres when USE_TESTCONTAINERS=true.
    """
    cfg = get_settings()
    if cfg.use_testcontainers:
        from testcontainers.postgres import PostgresContainer

        with PostgresContainer(cfg.test_db_image) as pg:
            # Force psycopg (v3) driver in the URL returned by testcontainers (it defaults to psycopg2)
            yield pg.get_connection_url().replace("psycopg2", "psycopg")
    else:
        yield f"sqlite:///{tmp_path_factory.mktemp('db') / 'tagserver.db'}"


@pytest.fixture(scope="session")
def db_engine(_database_url) -> Engine:
    engine = build_engine(get_settings(), url=_database_url)

    # Skip Alembic here; just create tables from models
    Base.metadata.create_all(bind=engine)

    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def clean_engine(db_engine) -> Engine:
    """Engine over freshly recreated tables, so ids start again at 1."""
    Base.metadata.drop_all(bind=db_engine)
    Base.metadata.create_all(bind=db_engine)
    return db_engine
