"""
Output serializer for status lines and captured child output.

Every write belonging to one result (its status line plus, in buffered
mode, the captured stdout and stderr bytes) happens under a single lock so
output from concurrent workers never interleaves.
"""

import sys
import threading
from typing import BinaryIO, Optional

from .types import ExecutionResult, RunSummary


class OutputSerializer:
    """
    Owns the shared output streams for a run.

    One instance is created per run and handed to every worker; there is no
    module-level lock.
    """

    def __init__(
        self,
        quiet: bool = False,
        stdout: Optional[BinaryIO] = None,
        stderr: Optional[BinaryIO] = None,
        summary: Optional[RunSummary] = None,
    ):
        """
        Initialize the serializer.

        Args:
            quiet: Suppress success status lines
            stdout: Binary stream for status lines and child stdout (default: sys.stdout.buffer)
            stderr: Binary stream for failures and child stderr (default: sys.stderr.buffer)
            summary: Counters updated for every reported result
        """
        self.quiet = quiet
        self.stdout = stdout if stdout is not None else sys.stdout.buffer
        self.stderr = stderr if stderr is not None else sys.stderr.buffer
        self.summary = summary or RunSummary()
        self._lock = threading.Lock()

    def report(self, result: ExecutionResult) -> None:
        """Write the status line and any captured output for one result."""
        invocation = result.invocation
        with self._lock:
            self.summary.record(result)
            try:
                if result.ok:
                    if not self.quiet:
                        self._write_line(self.stdout, f"cd {invocation.cwd}; {invocation.display_command}")
                else:
                    self._write_line(
                        self.stderr,
                        f"cd {invocation.cwd}: `{invocation.display_command}` failed on {result.failure_reason()}"
                    )

                if result.stdout:
                    self.stdout.write(result.stdout)
                if result.stderr:
                    self.stderr.write(result.stderr)
            finally:
                self._flush()

    def report_error(self, message: str) -> None:
        """Write a single error line that is not tied to an invocation."""
        with self._lock:
            self.summary.traversal_errors += 1
            try:
                self._write_line(self.stderr, message)
            finally:
                self._flush()

    def _write_line(self, stream: BinaryIO, line: str) -> None:
        stream.write(line.encode("utf-8", errors="replace") + b"\n")

    def _flush(self) -> None:
        self.stdout.flush()
        self.stderr.flush()
