# tagserver/domain/errors.py
from __future__ import annotations


class TagServiceError(Exception):
    """Base class for every error the tag service reports."""


class InvalidArgument(TagServiceError, ValueError):
    """Caller supplied an empty name/keyword or a zero id."""


class NotFound(TagServiceError, LookupError):
    """A referenced tag does not exist."""


class StoreUnavailable(TagServiceError):
    """The relational store could not be reached or failed the statement."""


class SearchBackendUnavailable(TagServiceError):
    """The search index could not be reached or returned a backend error."""


class InternalInconsistency(TagServiceError):
    """
    A link references a tag id the store no longer returns.
    Logged and dropped from results; never raised out of the service.
    """

    def __init__(self, entity_id: int, tag_ids: list[int]) -> None:
        self.entity_id = entity_id
        self.tag_ids = list(tag_ids)
        super().__init__(f"entity {entity_id} links missing tag ids {self.tag_ids}")
