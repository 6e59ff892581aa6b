"""Background learning for incoming chat phrases.

Storing a phrase costs one write per word, so the transports hand phrases to
a :class:`Learner` instead of storing them inline.  Phrases are queued and
consumed by a small, fixed pool of worker threads, which keeps the number of
threads bounded no matter how busy the chats are.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Fixed number of background workers processing queued phrases.
WORKER_LIMIT = 1


class Learner:
    """Queue of phrases waiting to be stored by ``store_phrase``."""

    def __init__(
        self,
        store_phrase: Callable[[int, str], None],
        workers: int = WORKER_LIMIT,
        name: str = "learner-worker",
    ) -> None:
        self._store_phrase = store_phrase
        self._tasks: "queue.Queue[Optional[Tuple[int, str]]]" = queue.Queue()
        self._threads: List[threading.Thread] = []
        self._workers = workers
        self._name = name

    def start(self) -> "Learner":
        """Start the pool of worker threads."""
        if self._threads:
            return self
        for i in range(self._workers):
            thread = threading.Thread(
                target=self._worker, daemon=True, name=f"{self._name}-{i}"
            )
            thread.start()
            self._threads.append(thread)
        return self

    def _worker(self) -> None:
        """Consume queued phrases one at a time."""
        while True:
            task = self._tasks.get()
            try:
                if task is None:
                    return
                chain_id, phrase = task
                self._store_phrase(chain_id, phrase)
            except Exception:
                logger.exception("error learning phrase")
            finally:
                self._tasks.task_done()

    def learn(self, chain_id: int, phrase: str) -> None:
        """Asynchronously store *phrase* in the chain of *chain_id*."""
        self._tasks.put((chain_id, phrase))

    def wait(self) -> None:
        """Block until all queued phrases are stored."""
        self._tasks.join()

    def stop(self) -> None:
        """Store the pending phrases and stop the workers."""
        for _ in self._threads:
            self._tasks.put(None)
        for thread in self._threads:
            thread.join()
        self._threads = []

    @property
    def worker_count(self) -> int:
        return sum(1 for t in self._threads if t.is_alive())

    def __enter__(self) -> "Learner":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
