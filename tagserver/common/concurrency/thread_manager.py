from __future__ import annotations

import logging
import time
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Set, TypeVar

R = TypeVar("R")

log = logging.getLogger(__name__)


@dataclass
class ThreadStats:
    start_ts: float
    tasks_submitted: int = 0
    tasks_completed: int = 0
    tasks_failed: int = 0
    tasks_dropped: int = 0

    @property
    def uptime_sec(self) -> float:
        return time.time() - self.start_ts

    @property
    def in_flight(self) -> int:
        return max(0, self.tasks_submitted - (self.tasks_completed + self.tasks_failed))


class ThreadManager:
    """
    A bounded thread-pool manager for fire-and-forget I/O work.

    Features
    --------
    - submit(fn, *args, **kwargs) -> Future | None, never blocks the caller
    - Bounded outstanding tasks (max_queue); overflow is dropped and counted
    - Task exceptions are logged and counted, never re-raised to the submitter
    - wait_idle(timeout) to let callers (and tests) observe completion
    - Stats snapshot
    - Clean shutdown, context manager support

    Notes
    -----
    - Tuned for short I/O-bound jobs (HTTP calls to a search backend).
    """

    def __init__(
        self,
        name: str = "worker",
        max_workers: Optional[int] = None,
        max_queue: Optional[int] = None,
        thread_name_prefix: Optional[str] = None,
        log_exceptions: bool = True,
    ) -> None:
        """
        Parameters
        ----------
        name:
            Logical name for logging.
        max_workers:
            Max threads in the pool. Default: auto for I/O (~min(8, max(4, 2*CPUs))).
        max_queue:
            Max number of *outstanding* tasks (submitted but not finished).
            When reached, further submissions are dropped instead of waiting.
            If None or <= 0, it's unbounded.
        thread_name_prefix:
            Prefix for thread names.
        log_exceptions:
            If True, exceptions in tasks are logged when futures complete.
        """
        if max_workers is None:
            import os
            n = os.cpu_count() or 4
            max_workers = max(4, min(8, n * 2))  # I/O-friendly default

        self._name = name
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix or f"{name}",
        )
        self._stats = ThreadStats(start_ts=time.time())
        self._log_exceptions = log_exceptions
        self._max_queue = max_queue if max_queue and max_queue > 0 else None
        self._pending: Set[Future] = set()

        self._closed = False
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)

    @property
    def name(self) -> str:
        return self._name

    # -------------------------
    # Lifecycle
    # -------------------------
    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        """Shut down the executor. Safe to call multiple times."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=cancel_futures)

    def __enter__(self) -> "ThreadManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)

    def stats(self) -> ThreadStats:
        """Return a *snapshot* of current stats."""
        with self._lock:
            return ThreadStats(
                start_ts=self._stats.start_ts,
                tasks_submitted=self._stats.tasks_submitted,
                tasks_completed=self._stats.tasks_completed,
                tasks_failed=self._stats.tasks_failed,
                tasks_dropped=self._stats.tasks_dropped,
            )

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every outstanding task has finished. Returns False on timeout."""
        with self._idle:
            return self._idle.wait_for(lambda: not self._pending, timeout=timeout)

    # -------------------------
    # Submission
    # -------------------------
    def submit(self, fn: Callable[..., R], /, *args, **kwargs) -> Optional[Future]:
        """
        Submit a single callable without blocking.
        Returns the Future, or None when the task was dropped (queue full or shut down).
        """
        with self._lock:
            if self._closed:
                self._stats.tasks_dropped += 1
                log.warning("%s: dropping task submitted after shutdown", self._name)
                return None
            if self._max_queue is not None and len(self._pending) >= self._max_queue:
                self._stats.tasks_dropped += 1
                log.warning("%s: queue full (%d outstanding), dropping task", self._name, len(self._pending))
                return None
            self._stats.tasks_submitted += 1
            fut: Future = self._executor.submit(fn, *args, **kwargs)
            self._pending.add(fut)

        fut.add_done_callback(self._on_done)
        return fut

    def _on_done(self, f: Future) -> None:
        exc = f.exception() if not f.cancelled() else None
        if exc is not None and self._log_exceptions:
            log.error("%s task failed: %s", self._name, exc, exc_info=exc)
        with self._lock:
            self._pending.discard(f)
            if f.cancelled() or exc is not None:
                self._stats.tasks_failed += 1
            else:
                self._stats.tasks_completed += 1
            self._idle.notify_all()
