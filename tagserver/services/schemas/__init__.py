from tagserver.services.schemas.tags import (
    TagCreate,
    TagCreated,
    TagRead,
    TagSearchResult,
    EntityLinkCreate,
    EntityLinkCreated,
    EntityTagList,
    ErrorBody,
)
__all__ = [
    "TagCreate",
    "TagCreated",
    "TagRead",
    "TagSearchResult",
    "EntityLinkCreate",
    "EntityLinkCreated",
    "EntityTagList",
    "ErrorBody",
]
