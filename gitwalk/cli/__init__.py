"""Command-line interface for git-walk."""
