"""Run configuration and the optional YAML config file loader."""

import os
import shlex
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from gitwalk.exceptions import ConfigValidationError, ValidationError


DEFAULT_COMMAND = ["git", "status", "--short", "-b"]
DEFAULT_CONCURRENCY = 20
DEFAULT_MARKER = ".git"
LOG_LEVELS = ("debug", "info", "warn", "error")


@dataclass
class WalkConfig:
    """Settings for one run; fixed once the run starts."""
    concurrency: int = DEFAULT_CONCURRENCY
    quiet: bool = False
    where: str = field(default_factory=os.getcwd)
    command: List[str] = field(default_factory=lambda: list(DEFAULT_COMMAND))
    marker: str = DEFAULT_MARKER
    debug: bool = False
    log_level: str = "warn"

    def with_overrides(self, **overrides: Any) -> "WalkConfig":
        """Return a copy with every override that is not None applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def validate(self) -> None:
        """Raise ConfigValidationError if the merged settings are unusable."""
        errors = []
        if self.concurrency < 1:
            errors.append(ValidationError(f"concurrency must be at least 1, got {self.concurrency}", "concurrency"))
        if not self.command:
            errors.append(ValidationError("command must not be empty", "command"))
        if not self.marker or os.sep in self.marker or (os.altsep and os.altsep in self.marker):
            errors.append(ValidationError(f"marker must be a plain directory name, got {self.marker!r}", "marker"))
        if self.log_level not in LOG_LEVELS:
            errors.append(ValidationError(f"log_level must be one of {', '.join(LOG_LEVELS)}", "log_level"))
        if errors:
            raise ConfigValidationError(errors)


class ConfigLoader:
    """Loads and strictly validates a git-walk YAML config file."""

    KNOWN_FIELDS = {'concurrency', 'quiet', 'where', 'command', 'marker', 'serial', 'debug', 'log_level'}

    def __init__(self):
        self.errors: List[ValidationError] = []

    def load(self, config_path: Path) -> Dict[str, Any]:
        """
        Load config overrides from a YAML file.

        Returns:
            Mapping of WalkConfig field names to values. A true `serial`
            entry is folded into `concurrency: 1`.

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigValidationError: If the file is malformed
        """
        self.errors = []
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            self._add_error(f"Failed to parse config: {e}")
            self._raise_validation_errors()

        if data is None:
            return {}
        if not isinstance(data, dict):
            self._add_error("Config must be a YAML mapping")
            self._raise_validation_errors()

        for key in data.keys():
            if key not in self.KNOWN_FIELDS:
                self._add_error(f"Unknown field '{key}'", str(key))

        values: Dict[str, Any] = {}
        for key in ('quiet', 'serial', 'debug'):
            if key in data:
                values[key] = self._check_type(data[key], bool, key)

        if 'concurrency' in data:
            concurrency = data['concurrency']
            # bool is an int subclass; reject it explicitly
            if isinstance(concurrency, bool) or not isinstance(concurrency, int):
                self._add_error(f"must be an integer, got {type(concurrency).__name__}", 'concurrency')
            elif concurrency < 1:
                self._add_error(f"must be at least 1, got {concurrency}", 'concurrency')
            else:
                values['concurrency'] = concurrency

        if 'where' in data:
            where = self._check_type(data['where'], str, 'where')
            if where is not None:
                values['where'] = os.path.expanduser(where)

        if 'marker' in data:
            values['marker'] = self._check_type(data['marker'], str, 'marker')

        if 'log_level' in data:
            level = self._check_type(data['log_level'], str, 'log_level')
            if level is not None and level not in LOG_LEVELS:
                self._add_error(f"must be one of {', '.join(LOG_LEVELS)}, got '{level}'", 'log_level')
            else:
                values['log_level'] = level

        if 'command' in data:
            values['command'] = self._parse_command(data['command'])

        if self.errors:
            self._raise_validation_errors()

        if values.pop('serial', None):
            values['concurrency'] = 1
        return {k: v for k, v in values.items() if v is not None}

    def _parse_command(self, command: Any) -> Optional[List[str]]:
        # A string is split like a shell would, but never run through one
        if isinstance(command, str):
            try:
                argv = shlex.split(command)
            except ValueError as e:
                self._add_error(f"cannot be parsed: {e}", 'command')
                return None
        elif isinstance(command, list) and all(isinstance(token, (str, int, float)) for token in command):
            argv = [str(token) for token in command]
        else:
            self._add_error("must be a string or a list of strings", 'command')
            return None

        if not argv:
            self._add_error("must not be empty", 'command')
            return None
        return argv

    def _check_type(self, value: Any, expected: type, key: str) -> Any:
        if not isinstance(value, expected):
            self._add_error(f"must be a {expected.__name__}, got {type(value).__name__}", key)
            return None
        return value

    def _add_error(self, message: str, path: str = "") -> None:
        self.errors.append(ValidationError(message=message, path=path))

    def _raise_validation_errors(self) -> None:
        raise ConfigValidationError(self.errors)
