# tagserver/database/core/main.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from tagserver.common.settings import Settings, get_settings

_settings = get_settings()

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _schema_or_none(schema: Optional[str]) -> Optional[str]:
    return schema if schema and schema.lower() != "public" else None


class Base(DeclarativeBase):
    # Set a default schema to keep DDL/Autogenerate explicit and consistent
    metadata = MetaData(
        schema=_schema_or_none(_settings.db_schema),
        naming_convention=NAMING_CONVENTION,
    )


def build_engine(settings: Optional[Settings] = None, *, url: Optional[str] = None) -> Engine:
    """
    Create the pooled Engine for the relational store.
    Every statement is bounded: statement_timeout on postgres, busy timeout on sqlite.
    """
    cfg = settings or get_settings()
    db_url = url or cfg.database_url
    timeout_ms = cfg.db.statement_timeout_ms

    if db_url.startswith("sqlite"):
        engine = create_engine(
            db_url,
            echo=cfg.db.echo,
            connect_args={"check_same_thread": False, "timeout": timeout_ms / 1000.0},
            future=True,
        )

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

        return engine

    engine = create_engine(
        db_url,
        echo=cfg.db.echo,
        pool_size=cfg.db.pool_size,
        max_overflow=cfg.db.max_overflow,
        pool_pre_ping=cfg.db.pool_pre_ping,
        pool_recycle=cfg.db.pool_recycle,
        pool_timeout=cfg.db.pool_timeout,
        connect_args={"options": f"-c statement_timeout={timeout_ms}"},
        future=True,
    )

    schema = _schema_or_none(cfg.db_schema)
    # Ensure the app schema is first, then public (so extensions remain visible)
    if schema:
        @event.listens_for(engine, "connect")
        def _set_search_path(dbapi_conn, _):
            with dbapi_conn.cursor() as cur:
                cur.execute(f'SET search_path TO "{schema}", public')

    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False, future=True, autoflush=False)


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """
    Yield a transaction-scoped Session.
    Commits on success, rolls back on error.
    """
    session: Session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
