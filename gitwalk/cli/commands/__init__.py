"""CLI command handlers."""

from .run import run_walk

__all__ = ['run_walk']
