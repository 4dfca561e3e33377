"""
Type definitions for command execution.

Defines invocations, concurrency modes and the tagged execution result
returned by the process executor.
"""

import signal
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class ConcurrencyMode(str, Enum):
    """How child output is handled for a whole run."""
    DIRECT = "direct"  # child inherits our stdout/stderr
    BUFFERED = "buffered"  # child output captured, dumped after the status line

    @classmethod
    def for_concurrency(cls, concurrency: int) -> "ConcurrencyMode":
        """Pick the mode for a pool of the given size."""
        if concurrency < 1:
            raise ValueError(f"Concurrency must be at least 1, got {concurrency}")
        return cls.DIRECT if concurrency == 1 else cls.BUFFERED


class Outcome(str, Enum):
    """Terminal state of one invocation."""
    SUCCESS = "success"
    EXIT_FAILURE = "exit_failure"
    SIGNAL_TERMINATION = "signal_termination"
    SPAWN_FAILURE = "spawn_failure"


@dataclass(frozen=True)
class Invocation:
    """
    One command run in one repository root.

    Attributes:
        command: Program name followed by its arguments
        cwd: Working directory (the repository root)
    """
    command: List[str]
    cwd: str

    @property
    def program(self) -> str:
        return self.command[0]

    @property
    def args(self) -> List[str]:
        return self.command[1:]

    @property
    def display_command(self) -> str:
        return " ".join(self.command)


@dataclass
class ExecutionResult:
    """Result of running one invocation."""
    invocation: Invocation
    outcome: Outcome
    exit_code: Optional[int] = None
    signal: Optional[int] = None
    error: Optional[str] = None
    # None when output went straight to our streams (direct mode)
    stdout: Optional[bytes] = None
    stderr: Optional[bytes] = None

    @classmethod
    def success(cls, invocation: Invocation, stdout: Optional[bytes] = None,
                stderr: Optional[bytes] = None) -> "ExecutionResult":
        return cls(invocation, Outcome.SUCCESS, exit_code=0, stdout=stdout, stderr=stderr)

    @classmethod
    def exit_failure(cls, invocation: Invocation, exit_code: int, stdout: Optional[bytes] = None,
                     stderr: Optional[bytes] = None) -> "ExecutionResult":
        return cls(invocation, Outcome.EXIT_FAILURE, exit_code=exit_code, stdout=stdout, stderr=stderr)

    @classmethod
    def signal_termination(cls, invocation: Invocation, signum: int, stdout: Optional[bytes] = None,
                           stderr: Optional[bytes] = None) -> "ExecutionResult":
        return cls(invocation, Outcome.SIGNAL_TERMINATION, signal=signum, stdout=stdout, stderr=stderr)

    @classmethod
    def spawn_failure(cls, invocation: Invocation, error: str) -> "ExecutionResult":
        return cls(invocation, Outcome.SPAWN_FAILURE, error=error)

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.SUCCESS

    @property
    def signaled(self) -> bool:
        return self.outcome == Outcome.SIGNAL_TERMINATION

    def failure_reason(self) -> str:
        """Human-readable reason used in the failure status line."""
        if self.outcome == Outcome.EXIT_FAILURE:
            return f"exit status {self.exit_code}"
        if self.outcome == Outcome.SIGNAL_TERMINATION:
            return f"signal: {signal_name(self.signal)}"
        if self.outcome == Outcome.SPAWN_FAILURE:
            return self.error or "failed to start"
        return ""


def signal_name(signum: Optional[int]) -> str:
    """Return the symbolic name of a signal number, e.g. 'SIGINT'."""
    if signum is None:
        return "unknown"
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)


@dataclass
class RunSummary:
    """Per-outcome counters for one run."""
    counts: Dict[Outcome, int] = field(default_factory=lambda: {outcome: 0 for outcome in Outcome})
    traversal_errors: int = 0
    worker_errors: int = 0
    # roots dropped after a signal stopped the run
    skipped: int = 0

    def record(self, result: ExecutionResult) -> None:
        self.counts[result.outcome] += 1

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def failed(self) -> int:
        return self.total - self.counts[Outcome.SUCCESS]

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.traversal_errors == 0 and self.worker_errors == 0
