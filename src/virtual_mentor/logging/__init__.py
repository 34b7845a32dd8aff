"""Logging utilities for Virtual Mentor."""

from virtual_mentor.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
