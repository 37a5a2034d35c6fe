# tagserver/database/alembic/env.py
from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool, text
from sqlalchemy.engine import Connection

# --- Load app settings --------------------------------------------------------
# This import must work without importing the whole app graph (keep it light).
from tagserver.common.settings import get_settings
from tagserver.database.models import Base

cfg = get_settings()
target_metadata = Base.metadata

# --- Alembic Config -----------------------------------------------------------
alembic_config = context.config

# If alembic.ini has a loggers section, set it up.
if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name, disable_existing_loggers=False)

# Precedence: explicit sqlalchemy.url (programmatic runs) > DATABASE_URL > Settings.
database_url = (
    alembic_config.get_main_option("sqlalchemy.url")
    or os.getenv("DATABASE_URL")
    or cfg.database_url
)

app_schema = cfg.db_schema if cfg.db_schema and cfg.db_schema.lower() != "public" else None
version_table_schema = app_schema and getattr(cfg, "alembic_version_table_schema", "public")


def include_object(object, name, type_, reflected, compare_to):
    """Limit autogenerate to our schema (but still allow version table in public)."""
    obj_schema = getattr(object, "schema", None)
    if type_ == "table":
        if obj_schema is None:
            return True
        return obj_schema in {app_schema, version_table_schema}
    return True


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (no DB connection)."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_schemas=bool(app_schema),
        include_object=include_object,
        version_table_schema=version_table_schema,
    )

    with context.begin_transaction():
        context.run_migrations()


def _prepare_connection(conn: Connection) -> None:
    """Ensure the app schema exists and is first on the search_path (postgres only)."""
    if conn.dialect.name != "postgresql" or not app_schema:
        return
    conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{app_schema}"'))
    conn.execute(text(f'SET search_path TO "{app_schema}", public'))


def run_migrations_online() -> None:
    """Run migrations in 'online' mode (with an Engine/Connection)."""
    connectable = create_engine(
        database_url,
        poolclass=pool.NullPool,
        future=True,
    )

    with connectable.connect() as connection:
        _prepare_connection(connection)

        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_schemas=bool(app_schema),
            include_object=include_object,
            version_table_schema=version_table_schema,
            compare_type=True,
            compare_server_default=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()

        connection.commit()


# Entrypoint selected by Alembic
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
