"""git-walk exceptions."""

from typing import List
from dataclasses import dataclass


@dataclass
class ValidationError:
    """Single configuration error."""
    message: str
    path: str = ""
    exit_code: int = 2


class ConfigValidationError(Exception):
    """Raised when a configuration file or flag combination is invalid.

    The loader collects every problem it finds before raising, so the CLI
    can report them all and map the failure to exit code 2.
    """

    def __init__(self, errors: List[ValidationError]):
        self.errors = errors
        self.exit_code = 2

        messages = []
        for error in errors:
            if error.path:
                messages.append(f"Config error at '{error.path}': {error.message}")
            else:
                messages.append(f"Config error: {error.message}")

        super().__init__("\n".join(messages))


class ChannelClosedError(Exception):
    """Raised when sending into a handoff channel that was already closed."""
