"""Helpers to load project-level configuration files."""

from __future__ import annotations

from collections.abc import Mapping as ABCMapping
from pathlib import Path
from typing import Any

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore


PROJECT_FILENAME = "pyproject.toml"
TOOL_SECTION = "virtual_mentor"


def _as_dict(payload: ABCMapping[str, Any]) -> dict[str, Any]:
    """Recursively coerce TOML mappings into regular dictionaries."""

    result: dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, ABCMapping):
            result[str(key)] = _as_dict(value)
        elif isinstance(value, list):
            result[str(key)] = [
                _as_dict(item) if isinstance(item, ABCMapping) else item for item in value
            ]
        else:
            result[str(key)] = value
    return result


def resolve_pyproject_path(candidate: Path) -> Path | None:
    """Return the ``pyproject.toml`` path ``candidate`` refers to, if any.

    A directory resolves to the file inside it; any other file name is
    rejected.
    """

    candidate = candidate.expanduser()
    if candidate.name == PROJECT_FILENAME:
        return candidate
    if candidate.suffix:
        return None
    return candidate / PROJECT_FILENAME


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Load the ``[tool.virtual_mentor]`` table from ``pyproject.toml``."""

    pyproject_path = resolve_pyproject_path(path)
    if pyproject_path is None:
        return None
    pyproject_path = pyproject_path.resolve(strict=False)
    if not pyproject_path.is_file():
        return None

    with pyproject_path.open("rb") as handle:
        payload = tomllib.load(handle)

    tool_section = payload.get("tool")
    if not isinstance(tool_section, ABCMapping):
        return None
    section = tool_section.get(TOOL_SECTION)
    if not isinstance(section, ABCMapping):
        return None
    return _as_dict(section), pyproject_path


__all__ = ["PROJECT_FILENAME", "TOOL_SECTION", "load_project_config", "resolve_pyproject_path"]
