"""
Process executor for running the configured command in one directory.

Spawns the command in argv mode (never through a shell) with the repository
root as working directory, and turns the outcome into a tagged
ExecutionResult.
"""

import logging
import subprocess
import sys
import threading
from typing import List, Optional

from .reporter import OutputSerializer
from .signals import SignalRelay
from .types import ConcurrencyMode, ExecutionResult, Invocation


logger = logging.getLogger(__name__)


class ProcessExecutor:
    """
    Executes one invocation per repository root.

    In direct mode the child writes straight to our stdout/stderr; in
    buffered mode both streams are captured and returned with the result.
    """

    def __init__(self, command: List[str], mode: ConcurrencyMode):
        """
        Initialize process executor.

        Args:
            command: Program and arguments, shared by every invocation
            mode: Direct or buffered output handling for the whole run
        """
        if not command:
            raise ValueError("Command must not be empty")
        self.command = list(command)
        self.mode = mode

    def invocation_for(self, directory: str) -> Invocation:
        return Invocation(command=self.command, cwd=directory)

    def execute(self, invocation: Invocation) -> ExecutionResult:
        """
        Run the invocation and wait for it to exit.

        Returns:
            ExecutionResult tagged with the outcome
        """
        logger.debug(f"Executing in {invocation.cwd}: {invocation.display_command}")

        capture = self.mode == ConcurrencyMode.BUFFERED
        if not capture:
            # The child shares our file descriptors; anything still sitting
            # in Python's buffers must go out first.
            sys.stdout.flush()
            sys.stderr.flush()

        try:
            completed = subprocess.run(
                [invocation.program, *invocation.args],
                cwd=invocation.cwd,
                capture_output=capture,
            )
        except OSError as e:
            logger.debug(f"Spawn failed in {invocation.cwd}: {e}")
            return ExecutionResult.spawn_failure(invocation, str(e))

        stdout: Optional[bytes] = completed.stdout if capture else None
        stderr: Optional[bytes] = completed.stderr if capture else None
        returncode = completed.returncode

        if returncode == 0:
            return ExecutionResult.success(invocation, stdout, stderr)
        if returncode < 0:
            return ExecutionResult.signal_termination(invocation, -returncode, stdout, stderr)
        return ExecutionResult.exit_failure(invocation, returncode, stdout, stderr)


def execute_and_report(
    executor: ProcessExecutor,
    serializer: OutputSerializer,
    relay: SignalRelay,
    directory: str,
    stop: Optional[threading.Event] = None,
) -> ExecutionResult:
    """
    Run the command in one directory and report the result.

    A signal termination is relayed to this process after reporting, even
    when reporting itself raises. stop is set first so no further commands
    are started while the signal is being delivered.
    """
    result = executor.execute(executor.invocation_for(directory))
    try:
        serializer.report(result)
    finally:
        if result.signaled and result.signal is not None:
            if stop is not None:
                stop.set()
            relay.relay(result.signal)
    return result
