"""Package version lookup.

Installed distributions report their version through :mod:`importlib.metadata`.
Source checkouts fall back to the newest ``## vX.Y.Z`` heading of
``CHANGELOG.md``.  Either way the result must be a ``MAJOR.MINOR.PATCH``
release.
"""

from __future__ import annotations

from importlib import metadata
from pathlib import Path
import re
from typing import Iterator, Optional

from packaging.version import InvalidVersion, Version

DISTRIBUTION = "virtual-mentor"

_CHANGELOG_HEADING = re.compile(r"^## v(?P<version>\d+\.\d+\.\d+)\b")


def _changelog_paths() -> Iterator[Path]:
    # src/virtual_mentor/_version.py -> src/, then the checkout root
    for parent in Path(__file__).resolve().parents[1:3]:
        yield parent / "CHANGELOG.md"


def changelog_version(path: Path) -> Optional[str]:
    """Return the first release heading of ``path`` or ``None``."""

    if not path.is_file():
        return None
    with path.open(encoding="utf-8") as handle:
        for line in handle:
            match = _CHANGELOG_HEADING.match(line)
            if match:
                return match.group("version")
    return None


def parse_release(raw: str) -> Version:
    try:
        parsed = Version(raw)
    except InvalidVersion as exc:
        raise RuntimeError(f"{DISTRIBUTION} reports an invalid version {raw!r}.") from exc
    if len(parsed.release) != 3:
        raise RuntimeError(
            f"{DISTRIBUTION} versions follow MAJOR.MINOR.PATCH, got {raw!r}."
        )
    return parsed


def _load_version() -> str:
    try:
        raw = metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        raw = next(
            (found for found in map(changelog_version, _changelog_paths()) if found),
            None,
        )
        if raw is None:
            raise RuntimeError(
                f"Cannot determine the {DISTRIBUTION} version: not installed and "
                "no CHANGELOG.md release heading found."
            ) from None
    parse_release(raw)
    return raw


__version__ = _load_version()
version_info = parse_release(__version__).release

__all__ = ["DISTRIBUTION", "__version__", "changelog_version", "parse_release", "version_info"]
