# tagserver/services/tags/publisher.py
from __future__ import annotations

from typing import Optional

from tagserver.common.concurrency.thread_manager import ThreadManager, ThreadStats
from tagserver.common.logging import get_logger
from tagserver.common.settings import PublisherConfig
from tagserver.domain.ports.search_index import TagSearchPort

logger = get_logger(__name__)


class IndexPublisher:
    """
    Best-effort mirror of newly created tags into the search index.

    publish() hands the job to a background pool and returns at once. A failed
    job is logged by the pool and dropped: no retry, nothing reaches the caller.
    When too many jobs are outstanding, new ones are dropped with a warning.
    """

    def __init__(self, index: TagSearchPort, manager: Optional[ThreadManager] = None) -> None:
        self.index = index
        self.manager = manager or ThreadManager(name="index-publisher", max_workers=2)

    @classmethod
    def from_config(cls, index: TagSearchPort, cfg: PublisherConfig) -> "IndexPublisher":
        manager = ThreadManager(
            name="index-publisher",
            max_workers=cfg.workers,
            max_queue=cfg.max_queue,
        )
        return cls(index, manager)

    def publish(self, tag_id: int, name: str) -> bool:
        """Queue (tag_id, name) for indexing. Returns False if the job was dropped."""
        fut = self.manager.submit(self._publish_one, tag_id, name)
        return fut is not None

    def _publish_one(self, tag_id: int, name: str) -> None:
        self.index.upsert_tag_document(tag_id, name)
        logger.debug("published tag %s to search index", tag_id)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        return self.manager.wait_idle(timeout)

    def stats(self) -> ThreadStats:
        return self.manager.stats()

    def shutdown(self, wait: bool = True) -> None:
        self.manager.shutdown(wait=wait)
