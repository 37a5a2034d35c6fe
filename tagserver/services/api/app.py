from __future__ import annotations

from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tagserver.common.logging import configure_logging, get_logger
from tagserver.common.settings import Settings, get_settings
from tagserver.database.core.main import build_engine, build_session_factory
from tagserver.database.repos.tag_store import SqlAlchemyTagStore
from tagserver.domain.errors import (
    InvalidArgument,
    NotFound,
    SearchBackendUnavailable,
    StoreUnavailable,
    TagServiceError,
)
from tagserver.services.api.routers import health, tags
from tagserver.services.search.elasticsearch_adapter import ElasticsearchTagIndex
from tagserver.services.tags.publisher import IndexPublisher
from tagserver.services.tags.service import TagService

logger = get_logger(__name__)

_ERROR_STATUS = {
    InvalidArgument: HTTPStatus.BAD_REQUEST,
    NotFound: HTTPStatus.NOT_FOUND,
    StoreUnavailable: HTTPStatus.SERVICE_UNAVAILABLE,
    SearchBackendUnavailable: HTTPStatus.SERVICE_UNAVAILABLE,
    TagServiceError: HTTPStatus.INTERNAL_SERVER_ERROR,
}


def _error_handler(status: HTTPStatus):
    async def _handle(request: Request, exc: Exception) -> JSONResponse:
        if status >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"status": int(status), "message": str(exc)})
    return _handle


def _lifespan(cfg: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "tag_service", None) is not None:
            # prebuilt service (tests, embedding apps): caller owns its resources
            yield
            return

        engine = build_engine(cfg)
        store = SqlAlchemyTagStore(build_session_factory(engine))
        index = ElasticsearchTagIndex.from_settings(cfg)
        publisher = IndexPublisher.from_config(index, cfg.publisher)
        app.state.tag_service = TagService(
            store,
            index,
            publisher=publisher,
            max_name_length=cfg.tags.max_name_length,
        )
        logger.info("tag service ready (index=%s)", cfg.search.index_name)
        try:
            yield
        finally:
            publisher.shutdown(wait=True)
            index.client.close()
            engine.dispose()
            app.state.tag_service = None
    return lifespan


def create_app(settings: Optional[Settings] = None, service: Optional[TagService] = None) -> FastAPI:
    cfg = settings or get_settings()
    configure_logging(cfg.log_level)
    app = FastAPI(
        title="Tag Server API",
        version="0.1.0",
        docs_url=f"{cfg.api.prefix}/docs",
        openapi_url=f"{cfg.api.prefix}/openapi.json",
        lifespan=_lifespan(cfg),
    )
    app.state.settings = cfg
    app.state.tag_service = service

    for exc_cls, status in _ERROR_STATUS.items():
        app.add_exception_handler(exc_cls, _error_handler(status))

    # Routers
    app.include_router(tags.router, prefix=f"{cfg.api.prefix}/tag")
    app.include_router(health.router)
    return app
