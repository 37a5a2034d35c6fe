from __future__ import annotations
from typing import List

from pydantic import BaseModel, ConfigDict, Field


# Tag
class TagCreate(BaseModel):
    name: str

class TagCreated(BaseModel):
    tag_id: int

class TagRead(BaseModel):
    tag_id: int = Field(validation_alias="id")
    name: str

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

class TagSearchResult(BaseModel):
    matches: List[TagRead] = Field(default_factory=list)

# Entity links
class EntityLinkCreate(BaseModel):
    entity_id: int
    tag_id: int

class EntityLinkCreated(BaseModel):
    link_id: int

class EntityTagList(BaseModel):
    tags: List[TagRead] = Field(default_factory=list)

class ErrorBody(BaseModel):
    status: int
    message: str
