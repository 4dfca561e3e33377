"""Run a command in every git repository below a directory."""

__version__ = "0.1.0"
