# tagserver/services/search/elasticsearch_adapter.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from elasticsearch import ApiError, Elasticsearch, TransportError

from tagserver.common.logging import get_logger
from tagserver.common.settings import SearchConfig, Settings, get_settings
from tagserver.domain.entities.tag import Tag
from tagserver.domain.errors import SearchBackendUnavailable

logger = get_logger(__name__)

_BACKEND_ERRORS = (ApiError, TransportError)


class ElasticsearchTagIndex:
    """
    TagSearchPort backed by an Elasticsearch index of {"tag_id", "name"} documents.

    Prefix semantics: a tag matches when its whole name starts with the keyword
    (case-insensitive), so "food" matches "food street" but "street" and
    "street food" do not. Hits are ranked by `match_phrase_prefix` on `name`,
    whose last term expands to at most `max_expansions` index terms.

    The anchor relies on the `name.keyword` sub-field that Elasticsearch's default
    dynamic mapping creates for string fields (ignore_above 256, which covers the
    255-character name limit).
    """

    def __init__(self, client: Elasticsearch, cfg: Optional[SearchConfig] = None) -> None:
        self.client = client
        self.cfg = cfg or get_settings().search

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ElasticsearchTagIndex":
        cfg = (settings or get_settings()).search
        client = Elasticsearch(hosts=cfg.host_list, request_timeout=cfg.request_timeout_sec)
        return cls(client, cfg)

    @property
    def index_name(self) -> str:
        return self.cfg.index_name

    # --- writes --------------------------------------------------------------

    def upsert_tag_document(self, tag_id: int, name: str) -> None:
        try:
            self.client.index(
                index=self.index_name,
                id=str(tag_id),
                document=Tag(tag_id, name).as_dict(),
                refresh=self.cfg.refresh_on_write,
            )
        except _BACKEND_ERRORS as e:
            raise SearchBackendUnavailable(f"index tag {tag_id}: {e}") from e
        logger.debug("indexed tag %s into %s", tag_id, self.index_name)

    # --- reads ---------------------------------------------------------------

    def build_query(self, keyword: str) -> Dict[str, Any]:
        # match_phrase_prefix scores; the keyword-field prefix filter pins the match to the start of the name
        return {
            "bool": {
                "must": [
                    {
                        "match_phrase_prefix": {
                            "name": {
                                "query": keyword,
                                "max_expansions": self.cfg.max_expansions,
                            }
                        }
                    }
                ],
                "filter": [
                    {
                        "prefix": {
                            self.cfg.anchor_field: {
                                "value": keyword,
                                "case_insensitive": True,
                            }
                        }
                    }
                ],
            }
        }

    def prefix_search(self, keyword: str) -> List[Tag]:
        try:
            resp = self.client.search(
                index=self.index_name,
                query=self.build_query(keyword),
                size=self.cfg.max_results,
            )
        except _BACKEND_ERRORS as e:
            logger.error("search %r on %s failed: %s", keyword, self.index_name, e)
            raise SearchBackendUnavailable(f"search: {e}") from e

        try:
            hits = resp["hits"]["hits"]
            return [
                Tag(id=int(h["_source"]["tag_id"]), name=str(h["_source"]["name"]))
                for h in hits
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise SearchBackendUnavailable(f"malformed search response: {e!r}") from e

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except _BACKEND_ERRORS as e:
            logger.warning("search ping failed: %s", e)
            return False
