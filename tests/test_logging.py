from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest

from virtual_mentor.logging import JsonFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "virtual_mentor.test", logging.WARNING, __file__, 10, "hello %s", ("world",), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields() -> None:
    payload = json.loads(
        JsonFormatter().format(_record(event="demo.event", laps=3, path=Path("a.ibt")))
    )

    assert payload["level"] == "warning"
    assert payload["logger"] == "virtual_mentor.test"
    assert payload["message"] == "hello world"
    assert payload["event"] == "demo.event"
    assert payload["laps"] == 3
    assert payload["path"] == "a.ibt"
    assert "lineno" not in payload
    assert "timestamp" in payload


def test_json_formatter_renders_exceptions() -> None:
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord(
            "virtual_mentor", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
        )

    payload = json.loads(JsonFormatter().format(record))

    assert "ValueError: boom" in payload["exception"]


def test_setup_logging_writes_json_to_file(tmp_path: Path) -> None:
    destination = tmp_path / "logs" / "mentor.log"

    handler = setup_logging({"logging": {"level": "debug", "output": str(destination)}})
    logging.getLogger("mentor_core.grid").debug("tick", extra={"event": "grid.test"})
    handler.flush()

    lines = destination.read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[-1])["event"] == "grid.test"
    assert logging.getLogger("virtual_mentor").level == logging.DEBUG


def test_setup_logging_replaces_previous_handler(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging({"logging": {"output": "stdout", "format": "text"}})
    setup_logging({"logging": {"output": "stdout", "format": "text", "level": "warning"}})

    logger = logging.getLogger("virtual_mentor")
    installed = [h for h in logger.handlers if getattr(h, "_virtual_mentor_handler", False)]
    assert len(installed) == 1

    logging.getLogger("virtual_mentor.cli").info("hidden")
    logging.getLogger("virtual_mentor.cli").warning("shown")
    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "WARNING virtual_mentor.cli: shown" in out


@pytest.mark.parametrize(
    "logging_config",
    [{"format": "xml"}, {"level": "chatty"}],
)
def test_setup_logging_rejects_invalid_settings(logging_config) -> None:
    with pytest.raises(ValueError):
        setup_logging({"logging": logging_config})
