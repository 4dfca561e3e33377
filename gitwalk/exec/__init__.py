"""
Execution module for git-walk.
Handles process execution, serialized reporting and signal relay.
"""

from .types import ConcurrencyMode, ExecutionResult, Invocation, Outcome, RunSummary
from .reporter import OutputSerializer
from .signals import SignalRelay
from .process_executor import ProcessExecutor, execute_and_report

__all__ = [
    "ConcurrencyMode",
    "ExecutionResult",
    "Invocation",
    "Outcome",
    "RunSummary",
    "OutputSerializer",
    "SignalRelay",
    "ProcessExecutor",
    "execute_and_report",
]
