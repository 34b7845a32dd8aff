"""Convenience re-exports for test helpers."""

from __future__ import annotations

from tests.helpers.cli import pandas_engine_failure, run_cli_in_tmp
from tests.helpers.ibt import (
    DISK_SUMMARY_TEST_BYTES,
    HEADER_TEST_BYTES,
    LAP_VARIABLES,
    SESSION_TIME_DESCRIPTOR_BYTES,
    SESSION_YAML,
    Variable,
    build_recording,
    lap_rows,
    pack_descriptor,
    pack_disk_summary,
    pack_header,
)
from tests.helpers.laps import build_bundle, build_lap

__all__ = [
    "DISK_SUMMARY_TEST_BYTES",
    "HEADER_TEST_BYTES",
    "LAP_VARIABLES",
    "SESSION_TIME_DESCRIPTOR_BYTES",
    "SESSION_YAML",
    "Variable",
    "build_bundle",
    "build_lap",
    "build_recording",
    "lap_rows",
    "pack_descriptor",
    "pack_disk_summary",
    "pack_header",
    "pandas_engine_failure",
    "run_cli_in_tmp",
]
