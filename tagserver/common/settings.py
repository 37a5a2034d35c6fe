# tagserver/common/settings.py
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional
from pydantic import BaseModel, Field, AliasChoices, field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _csv_to_list(v: str | List[str] | None) -> List[str]:
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        return [str(s).strip() for s in v if s and str(s).strip()]
    return [s.strip() for s in str(v).split(",") if s.strip()]


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class APIConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 9800
    prefix: str = "/api"


class DBConfig(BaseModel):
    driver: str = "postgresql+psycopg"
    host: str = "localhost"
    port: int = 5432
    name: str = "tagserver"
    user: str = "tagserver"
    password: str = "tagserver"
    schema_name: str = "public"
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 20
    pool_pre_ping: bool = True
    pool_recycle: int = 1800
    pool_timeout: int = 10                  # seconds to wait for a pooled connection
    statement_timeout_ms: int = 5000        # per-statement bound (postgres) / busy timeout (sqlite)

    # Optional single URL (if set, it takes precedence)
    url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("url", "DATABASE_URL", "database_url"),
    )

    @computed_field  # type: ignore[misc]
    @property
    def effective_url(self) -> str:
        if self.url:
            return self.url
        return f"{self.driver}://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


class SearchConfig(BaseModel):
    # comma separated, e.g. "http://es1:9200,http://es2:9200"
    hosts: str = "http://localhost:9200"
    index_name: str = "tags"
    anchor_field: str = "name.keyword"      # un-analyzed copy of name used for the leading-prefix filter
    request_timeout_sec: float = 5.0
    # match_phrase_prefix expansion cap for the last term
    max_expansions: int = Field(50, ge=1, le=1024)
    max_results: int = Field(50, ge=1, le=1000)
    refresh_on_write: bool = True

    @field_validator("refresh_on_write", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v, default=True)

    @computed_field  # type: ignore[misc]
    @property
    def host_list(self) -> List[str]:
        return _csv_to_list(self.hosts)


class PublisherConfig(BaseModel):
    workers: int = Field(2, ge=1, le=64)
    max_queue: int = Field(1000, ge=0, description="Outstanding publish jobs before new ones are dropped (0 = unbounded)")


class TagConfig(BaseModel):
    max_name_length: int = Field(255, ge=1, le=255)


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "tagserver"
    app_env: str = "development"  # development|test|staging|production
    log_level: str = "INFO"

    # -------- Sub-configs --------
    api: APIConfig = APIConfig()
    db: DBConfig = DBConfig()
    search: SearchConfig = SearchConfig()
    publisher: PublisherConfig = PublisherConfig()
    tags: TagConfig = TagConfig()

    # -------- Alembic / migrations --------
    alembic_version_table_schema: str = "public"

    # -------- Testcontainers / CI toggles --------
    use_testcontainers: bool = False
    test_db_image: str = "postgres:15-alpine"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("use_testcontainers", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v)

    # ===== Convenience: DB URL & schema =====
    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        return self.db.effective_url

    @computed_field  # type: ignore[misc]
    @property
    def db_schema(self) -> str:
        return self.db.schema_name


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this everywhere you need config:
        from tagserver.common.settings import get_settings
        cfg = get_settings()
    """
    return Settings()  # pydantic_settings will read from .env automatically
