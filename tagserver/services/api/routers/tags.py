from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from tagserver.services.api.deps import get_tag_service
from tagserver.services.schemas import (
    TagCreate,
    TagCreated,
    TagRead,
    TagSearchResult,
    EntityLinkCreate,
    EntityLinkCreated,
    EntityTagList,
    ErrorBody,
)
from tagserver.services.tags.service import TagService

# mounted by create_app under f"{api.prefix}/tag"
router = APIRouter(
    tags=["tags"],
    responses={
        400: {"model": ErrorBody},
        503: {"model": ErrorBody},
    },
)


@router.post("", response_model=TagCreated)
def create_tag(payload: TagCreate, svc: TagService = Depends(get_tag_service)) -> TagCreated:
    return TagCreated(tag_id=svc.create_tag(payload.name))


@router.get("/search", response_model=TagSearchResult)
def search_tags(
    keyword: str = Query(""),
    svc: TagService = Depends(get_tag_service),
) -> TagSearchResult:
    tags = svc.search_tags(keyword)
    return TagSearchResult(matches=[TagRead.model_validate(t) for t in tags])


@router.post(
    "/link_entity",
    response_model=EntityLinkCreated,
    responses={404: {"model": ErrorBody}},
)
def link_entity(payload: EntityLinkCreate, svc: TagService = Depends(get_tag_service)) -> EntityLinkCreated:
    return EntityLinkCreated(link_id=svc.link_entity_tag(payload.entity_id, payload.tag_id))


@router.get("/entity_tags", response_model=EntityTagList)
def entity_tags(
    entity_id: int = Query(0),
    svc: TagService = Depends(get_tag_service),
) -> EntityTagList:
    tags = svc.list_entity_tags(entity_id)
    return EntityTagList(tags=[TagRead.model_validate(t) for t in tags])
