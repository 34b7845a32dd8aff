"""Command helpers for the ``laps`` sub-command."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Mapping

from virtual_mentor.cli.io import (
    LAP_OUTPUT_FORMATS,
    infer_lap_format,
    load_laps,
    persist_laps,
    render_json,
)

logger = logging.getLogger(__name__)


def register_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    *,
    config: Mapping[str, Any],
) -> None:
    """Register the ``laps`` sub-command."""

    parser = subparsers.add_parser(
        "laps",
        help="Split a recording into laps and summarise them.",
    )
    parser.add_argument("recording", type=Path, help="Path to the IBT recording.")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Persist per-lap channels (JSON Lines, or Parquet for *.parquet).",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=LAP_OUTPUT_FORMATS,
        default=None,
        help="Output format overriding the one inferred from --output.",
    )
    parser.set_defaults(handler=handle)


def handle(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    source = Path(namespace.recording)
    laps = load_laps(source)
    if namespace.output is not None:
        destination = Path(namespace.output)
        fmt = namespace.output_format or infer_lap_format(destination)
        persist_laps(laps, destination, fmt)
        logger.info(
            "Persisted laps.",
            extra={
                "event": "cli.laps.persisted",
                "destination": str(destination),
                "format": fmt,
                "laps": len(laps),
            },
        )
    return render_json({"recording": str(source), "laps": [lap.summary() for lap in laps]})
