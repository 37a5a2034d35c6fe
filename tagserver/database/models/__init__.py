# tagserver/database/models/__init__.py

from tagserver.database.core.main import Base
from tagserver.database.models.tagging import (
    Tag,
    EntityTag,
)

__all__ = [
    "Base",
    "Tag",
    "EntityTag",
]
