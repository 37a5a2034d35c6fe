# tagserver/services/api/routers/health.py
from __future__ import annotations
from fastapi import APIRouter, Depends, Request
from tagserver.services.api.deps import get_tag_service
from tagserver.services.tags.service import TagService

router = APIRouter()

@router.get("/healthz")
def healthz(request: Request, svc: TagService = Depends(get_tag_service)):
    s = request.app.state.settings
    store_ok = svc.store.ping()
    index_ok = svc.index.ping()
    return {
        "ok": store_ok,  # store only, the index is best-effort
        "app": s.app_name,
        "env": s.app_env,
        "store": store_ok,
        "index": index_ok,
    }
