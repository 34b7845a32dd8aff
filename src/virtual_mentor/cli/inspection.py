"""Command helpers for the ``inspect`` sub-command."""

from __future__ import annotations

import argparse
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Mapping

from virtual_mentor.cli.io import load_recording, render_json
from virtual_mentor.ibt import IbtRecording


def register_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    *,
    config: Mapping[str, Any],
) -> None:
    """Register the ``inspect`` sub-command."""

    parser = subparsers.add_parser(
        "inspect",
        help="Describe the header, disk summary and variables of a recording.",
    )
    parser.add_argument("recording", type=Path, help="Path to the IBT recording.")
    parser.add_argument(
        "--descriptors",
        action=argparse.BooleanOptionalAction,
        default=bool(dict(config.get("inspect", {})).get("descriptors", True)),
        help="Include the variable descriptors (default: enabled).",
    )
    parser.set_defaults(handler=handle)


def describe_recording(recording: IbtRecording, *, descriptors: bool = True) -> Dict[str, Any]:
    header = asdict(recording.header)
    header["status"] = recording.header.status.value
    active = recording.header.active_buffer()
    payload: Dict[str, Any] = {
        "header": header,
        "active_buffer": asdict(active),
        "disk_summary": asdict(recording.disk_summary),
        "session": {
            "driver": recording.session.driver,
            "car": recording.session.car,
            "category": recording.session.category,
            "circuit": recording.session.circuit,
            "date": recording.session.date,
            "time_of_day": recording.session.time_of_day,
        },
        "stride": recording.channels.stride,
        "ticks": recording.channels.tick_count,
        "channels": list(recording.channels.names),
    }
    if descriptors:
        payload["descriptors"] = [
            {
                "name": descriptor.name,
                "type": descriptor.var_type.label,
                "offset": descriptor.offset,
                "count": descriptor.count,
                "count_as_time": descriptor.count_as_time,
                "description": descriptor.description,
                "unit": descriptor.unit,
            }
            for descriptor in recording.descriptors
        ]
    return payload


def handle(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    recording = load_recording(Path(namespace.recording))
    return render_json(describe_recording(recording, descriptors=namespace.descriptors))
