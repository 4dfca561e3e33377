"""
Signal relay: re-raise a child's terminating signal against ourselves.

When a user interrupts one child (Ctrl-C reaches the whole foreground
process group) the run should stop as well instead of carrying on with the
remaining repositories. On POSIX a child killed by a signal shows up as a
negative return code; we send the same signal to our own pid.

Platforms without POSIX signals never report a signal termination, so the
relay is simply never reached there.
"""

import logging
import os

from .types import signal_name


logger = logging.getLogger(__name__)


class SignalRelay:
    """Sends a signal to the current process."""

    def relay(self, signum: int) -> None:
        """
        Deliver signum to this process.

        Best-effort: a delivery failure is logged, not raised.
        """
        logger.debug(f"Relaying {signal_name(signum)} to pid {os.getpid()}")
        try:
            os.kill(os.getpid(), signum)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not relay {signal_name(signum)} to self: {e}")
