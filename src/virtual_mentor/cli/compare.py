"""Command helpers for the ``compare`` sub-command."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from mentor_core.alignment import AlignmentError, DifferentCircuitsError
from mentor_core.clustering import ClusteringConfigError
from mentor_core.comparison import ComparisonConfig, compare_laps
from mentor_core.grid import GridConfigError, NoValidModelFound

from virtual_mentor.cli.errors import CliError
from virtual_mentor.cli.io import load_laps, render_json, select_lap, write_json

_RANGE_HELP = "INIT [MAX INC]"


def _range_argument(
    parser: argparse.ArgumentParser, flag: str, dest: str, kind: type, help_text: str
) -> None:
    parser.add_argument(
        flag,
        dest=dest,
        nargs="+",
        type=kind,
        metavar="VALUE",
        default=None,
        help=f"{help_text} as {_RANGE_HELP}.",
    )


def register_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    *,
    config: Mapping[str, Any],
) -> None:
    """Register the ``compare`` sub-command."""

    compare_cfg = dict(config.get("compare", {}))
    parser = subparsers.add_parser(
        "compare",
        help="Compare a target lap against a reference lap and tag the differences.",
    )
    parser.add_argument("reference", type=Path, help="Recording holding the reference lap.")
    parser.add_argument("reference_lap", type=int, help="Reference lap number.")
    parser.add_argument("target", type=Path, help="Recording holding the target lap.")
    parser.add_argument("target_lap", type=int, help="Target lap number.")
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help=f"Tendency threshold (default: {compare_cfg.get('threshold', 0.2)}).",
    )
    _range_argument(parser, "--clusters", "clusters", int, "Cluster count range")
    _range_argument(parser, "--fuzziness", "fuzziness", float, "Fuzziness range")
    _range_argument(parser, "--max-iter", "max_iter", int, "Iteration limit range")
    _range_argument(parser, "--tolerance", "tolerance", float, "Convergence tolerance range")
    parser.add_argument(
        "--channels",
        nargs="+",
        default=None,
        help="Channels to cluster (default: speed throttle brake gear steering_wheel_angle).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for fitting.")
    parser.add_argument("--name", default=None, help="Name given to the comparison.")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the full comparison (samples, models and tags) as JSON.",
    )
    parser.set_defaults(handler=handle)


def _resolve_config(namespace: argparse.Namespace, config: Mapping[str, Any]) -> ComparisonConfig:
    payload: Dict[str, Any] = dict(config.get("compare", {}))
    for key in ("clusters", "fuzziness", "max_iter", "tolerance"):
        values: Optional[List[Any]] = getattr(namespace, key)
        if values is None:
            continue
        if len(values) not in (1, 3):
            raise CliError(
                f"--{key.replace('_', '-')} expects INIT or INIT MAX INC",
                category="usage",
                context={"option": key, "values": values},
            )
        payload[key] = tuple(values)
    if namespace.threshold is not None:
        payload["threshold"] = namespace.threshold
    if namespace.channels:
        payload["channels"] = namespace.channels
    if namespace.seed is not None:
        payload["seed"] = namespace.seed
    try:
        return ComparisonConfig.from_mapping(payload)
    except (GridConfigError, TypeError, ValueError) as exc:
        raise CliError(
            f"Invalid comparison settings: {exc}", category="usage", context=payload
        ) from exc


def handle(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    """Execute the ``compare`` command returning the JSON summary."""

    settings = _resolve_config(namespace, config)
    reference_source = Path(namespace.reference)
    target_source = Path(namespace.target)
    reference = select_lap(load_laps(reference_source), namespace.reference_lap, reference_source)
    target = select_lap(load_laps(target_source), namespace.target_lap, target_source)

    try:
        comparison = compare_laps(reference, target, settings, name=namespace.name)
    except DifferentCircuitsError as exc:
        raise CliError(
            str(exc),
            category="usage",
            context={"reference": exc.reference, "target": exc.target},
        ) from exc
    except (AlignmentError, ClusteringConfigError, GridConfigError) as exc:
        raise CliError(str(exc), category="usage") from exc
    except NoValidModelFound as exc:
        raise CliError(str(exc), category="runtime") from exc

    if namespace.output is not None:
        write_json(comparison.as_dict(), Path(namespace.output))
    return render_json(comparison.summary())
