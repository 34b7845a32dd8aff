"""Recording, configuration and output helpers for the Virtual Mentor CLI."""

from __future__ import annotations

import gzip
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from mentor_core.laps import Lap
from virtual_mentor.cli.errors import CliError
from virtual_mentor.configuration import PROJECT_FILENAME, load_project_config
from virtual_mentor.ibt import IbtError, IbtRecording, read_recording
from virtual_mentor.segmentation import segment_laps

CONFIG_ENV_VAR = "VIRTUAL_MENTOR_CONFIG"

LAP_OUTPUT_FORMATS = ("jsonl", "parquet")

_PARQUET_DEPENDENCY_MESSAGE = (
    "Writing Parquet laps requires the 'pandas' package and a compatible engine "
    "(install 'pyarrow' or 'fastparquet')."
)


def _iter_unique_paths(candidates: Sequence[Path]) -> List[Path]:
    seen: Dict[Path, None] = {}
    ordered: List[Path] = []
    for candidate in candidates:
        resolved = candidate.expanduser().resolve(strict=False)
        if resolved in seen:
            continue
        seen[resolved] = None
        ordered.append(resolved)
    return ordered


def _pyproject_candidates(base: Path) -> List[Path]:
    base = base.expanduser()
    if base.name == PROJECT_FILENAME:
        return [base]
    if base.suffix:
        return []
    return [base / PROJECT_FILENAME]


def load_cli_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load CLI defaults from the first ``pyproject.toml`` that defines them.

    The explicit ``path`` wins over ``$VIRTUAL_MENTOR_CONFIG``, which wins
    over the current working directory.
    """

    env_config = os.environ.get(CONFIG_ENV_VAR)
    bases: List[Path] = []
    if path is not None:
        bases.append(path)
    if env_config:
        bases.append(Path(env_config))
    bases.append(Path.cwd())

    candidates: List[Path] = []
    for base in bases:
        candidates.extend(_pyproject_candidates(base))
    for candidate in _iter_unique_paths(candidates):
        loaded = load_project_config(candidate)
        if not loaded:
            continue
        payload, resolved = loaded
        payload["_config_path"] = str(resolved)
        return payload
    return {"_config_path": None}


def load_recording(source: Path) -> IbtRecording:
    """Decode the recording at ``source`` translating failures into CLI errors."""

    if not source.exists():
        raise CliError(
            f"Recording {source} does not exist",
            category="not_found",
            context={"path": str(source)},
        )
    try:
        with source.open("rb") as handle:
            return read_recording(handle)
    except IbtError as exc:
        raise CliError(
            f"Cannot decode {source}: {exc}",
            category="io",
            context={"path": str(source), "region": getattr(exc, "region", None)},
        ) from exc
    except OSError as exc:
        raise CliError(
            f"Cannot read {source}: {exc}",
            category="io",
            context={"path": str(source)},
        ) from exc


def load_laps(source: Path) -> List[Lap]:
    recording = load_recording(source)
    return segment_laps(recording.channels, recording.session, file_id=source.name)


def select_lap(laps: Sequence[Lap], number: int, source: Path) -> Lap:
    for lap in laps:
        if lap.number == number:
            return lap
    raise CliError(
        f"Lap {number} not found in {source}",
        category="not_found",
        context={"path": str(source), "lap": number, "available": len(laps)},
    )


def _laps_frame(laps: Sequence[Lap]):
    import pandas as pd  # type: ignore

    frames = []
    for lap in laps:
        columns = {name: values for name, values in lap.channels.items() if values.size}
        frame = pd.DataFrame(columns)
        frame.insert(0, "lap_number", lap.number)
        frame.insert(0, "lap_id", lap.id)
        frames.append(frame)
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)


def persist_laps(laps: Sequence[Lap], destination: Path, fmt: str) -> None:
    """Write ``laps`` to ``destination`` as JSON Lines or Parquet."""

    destination.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "jsonl":
        opener = gzip.open if destination.suffix in {".gz", ".gzip"} else open
        with opener(destination, "wt", encoding="utf-8") as handle:
            for lap in laps:
                handle.write(json.dumps(lap.as_dict()))
                handle.write("\n")
        return

    if fmt == "parquet":
        try:
            frame = _laps_frame(laps)
            frame.to_parquet(destination, index=False)
            return
        except ImportError as exc:
            raise CliError(
                _PARQUET_DEPENDENCY_MESSAGE,
                category="usage",
                context={"format": fmt, "destination": str(destination)},
            ) from exc

    raise CliError(
        f"Unsupported format '{fmt}'.",
        category="usage",
        context={"format": fmt, "destination": str(destination)},
    )


def render_json(payload: Mapping[str, Any] | Sequence[Any]) -> str:
    return json.dumps(payload, indent=2, sort_keys=False)


def write_json(payload: Mapping[str, Any], destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(json.dumps(payload), encoding="utf-8")


def infer_lap_format(destination: Path) -> str:
    name = destination.name.lower()
    if name.endswith(".parquet"):
        return "parquet"
    return "jsonl"


__all__ = [
    "CONFIG_ENV_VAR",
    "LAP_OUTPUT_FORMATS",
    "infer_lap_format",
    "load_cli_config",
    "load_laps",
    "load_recording",
    "persist_laps",
    "render_json",
    "select_lap",
    "write_json",
]
