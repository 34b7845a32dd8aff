"""Command line utilities for Virtual Mentor."""

from virtual_mentor.cli.app import main, run_cli

__all__ = ["main", "run_cli"]
