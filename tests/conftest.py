from __future__ import annotations

import io
import logging
import sys
from pathlib import Path
from textwrap import dedent

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
for _path in (SRC_ROOT, ROOT):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))


from tests.helpers import SESSION_YAML, LAP_VARIABLES, build_recording, lap_rows  # noqa: E402


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


@pytest.fixture
def recording_bytes() -> bytes:
    """Three laps (0, 1, 2) of six samples each with session metadata."""

    return build_recording(
        LAP_VARIABLES, lap_rows({0: 6, 1: 6, 2: 6}), session_yaml=SESSION_YAML
    )


@pytest.fixture
def recording_source(recording_bytes: bytes) -> io.BytesIO:
    return io.BytesIO(recording_bytes)


@pytest.fixture
def recording_path(tmp_path: Path, recording_bytes: bytes) -> Path:
    path = tmp_path / "session.ibt"
    path.write_bytes(recording_bytes)
    return path


@pytest.fixture(autouse=True)
def _reset_package_loggers():
    yield
    for name in ("virtual_mentor", "mentor_core"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            if getattr(handler, "_virtual_mentor_handler", False):
                logger.removeHandler(handler)
                handler.close()
        logger.setLevel(logging.NOTSET)
