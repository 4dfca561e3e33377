"""
Walk runner: one complete run of the command over every repository root.

Starts the worker pool, walks the tree on the calling thread feeding the
handoff channel, then waits for the pool to drain.
"""

import logging
import threading
from functools import partial
from typing import Optional

from ..config import WalkConfig
from ..exec import (
    ConcurrencyMode,
    OutputSerializer,
    ProcessExecutor,
    RunSummary,
    SignalRelay,
    execute_and_report,
)
from .channel import HandoffChannel
from .pool import WorkerPool
from .producer import DirectoryProducer


logger = logging.getLogger(__name__)


class WalkRunner:
    """Wires producer, channel, pool, executor and serializer for one run."""

    def __init__(
        self,
        config: WalkConfig,
        serializer: Optional[OutputSerializer] = None,
        executor: Optional[ProcessExecutor] = None,
        relay: Optional[SignalRelay] = None,
    ):
        self.config = config
        self.mode = ConcurrencyMode.for_concurrency(config.concurrency)
        self.serializer = serializer or OutputSerializer(quiet=config.quiet)
        self.executor = executor or ProcessExecutor(config.command, self.mode)
        self.relay = relay or SignalRelay()

    def run(self) -> RunSummary:
        """
        Execute the command in every repository root under config.where.

        Returns:
            RunSummary with per-outcome counts
        """
        logger.debug(f"concurrency {self.config.concurrency} ({self.mode.value})")
        logger.debug(f"cmd {self.config.command}")
        logger.debug(f"where {self.config.where!r}")

        # Set by a worker that relays a child's signal; nothing new starts after that.
        stop = threading.Event()
        channel: HandoffChannel[str] = HandoffChannel(maxsize=self.config.concurrency)
        pool = WorkerPool(
            self.config.concurrency,
            partial(execute_and_report, self.executor, self.serializer, self.relay, stop=stop),
            stop=stop,
        )
        producer = DirectoryProducer(
            self.config.where,
            marker=self.config.marker,
            on_error=self.serializer.report_error,
        )

        pool.start(channel)
        found = producer.produce(channel, stop=stop)
        pool.join()

        summary = self.serializer.summary
        summary.worker_errors += pool.errors
        summary.skipped += pool.skipped
        counts = ", ".join(f"{outcome.value}={n}" for outcome, n in summary.counts.items())
        logger.info(
            f"Ran in {found} repositories: {counts}, traversal errors={summary.traversal_errors}, "
            f"worker errors={summary.worker_errors}, skipped={summary.skipped}"
        )
        return summary
