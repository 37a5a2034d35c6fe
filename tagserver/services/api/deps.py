# tagserver/services/api/deps.py
from __future__ import annotations
from fastapi import Request

from tagserver.services.tags.service import TagService


def get_tag_service(request: Request) -> TagService:
    """
    Provide the TagService wired by create_app().
    Tests swap it with app.dependency_overrides[get_tag_service] or pass one to create_app().
    """
    return request.app.state.tag_service
