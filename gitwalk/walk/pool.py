"""Fixed-size worker pool consuming repository roots from a handoff channel."""

import logging
import threading
from typing import Callable, List, Optional

from .channel import HandoffChannel


logger = logging.getLogger(__name__)


class WorkerPool:
    """
    Runs `concurrency` worker threads over one channel.

    Each worker handles one directory at a time and exits once the channel
    is closed and drained. Workers are daemon threads so an interrupt on the
    main thread is not held up by children that are still running.

    Once `stop` is set, workers keep draining the channel but hand nothing
    more to the handler, so a producer blocked on a full channel still
    gets through to close().
    """

    def __init__(
        self,
        concurrency: int,
        handler: Callable[[str], object],
        stop: Optional[threading.Event] = None,
    ):
        """
        Initialize worker pool.

        Args:
            concurrency: Number of worker threads (at least 1)
            handler: Called synchronously with each received directory
            stop: When set, received directories are skipped
        """
        if concurrency < 1:
            raise ValueError(f"Concurrency must be at least 1, got {concurrency}")
        self.concurrency = concurrency
        self.handler = handler
        self.stop = stop or threading.Event()
        self.errors = 0
        self.skipped = 0
        self._threads: List[threading.Thread] = []
        self._counts_lock = threading.Lock()

    def start(self, channel: HandoffChannel[str]) -> None:
        if self._threads:
            raise RuntimeError("Worker pool already started")
        for worker_id in range(self.concurrency):
            thread = threading.Thread(
                target=self._worker_loop,
                args=(channel, worker_id),
                name=f"gitwalk-worker-{worker_id}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()
        logger.debug(f"Started {self.concurrency} worker(s)")

    def join(self) -> None:
        """Block until every worker has terminated."""
        for thread in self._threads:
            thread.join()

    def _worker_loop(self, channel: HandoffChannel[str], worker_id: int) -> None:
        for directory in channel:
            if self.stop.is_set():
                logger.debug(f"Worker {worker_id} skipping {directory}: run stopped")
                with self._counts_lock:
                    self.skipped += 1
                continue
            try:
                self.handler(directory)
            except Exception:
                logger.exception(f"Worker {worker_id} failed while handling {directory}")
                with self._counts_lock:
                    self.errors += 1
        logger.debug(f"Worker {worker_id} finished")
