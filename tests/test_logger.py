"""Tests for the structured logger."""

from __future__ import annotations

import json

from shared.logger import ElfsymLogger


def _lines(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_json_file_records(tmp_path):
    log_file = tmp_path / "logs" / "elfsym.log"
    log = ElfsymLogger("unit", log_file=log_file, json_logs=True, console_output=False)
    with log.operation("collect_symbols"):
        log.warning("Skipping entry %d", 3, section=1)
    log.info("done")

    first, second = _lines(log_file)
    assert first["level"] == "WARNING"
    assert first["logger"] == "elfsym.unit"
    assert first["message"] == "Skipping entry 3"
    assert first["operation"] == "collect_symbols"
    assert first["fields"] == {"section": 1}
    assert second["tool_name"] == "unit"
    assert "operation" not in second


def test_level_filters_records(tmp_path):
    log_file = tmp_path / "elfsym.log"
    log = ElfsymLogger(
        "unit-level", log_level="WARNING", log_file=log_file, console_output=False
    )
    with log.timed("work"):
        log.info("hidden")
    log.error("shown")
    text = log_file.read_text(encoding="utf-8")
    assert "hidden" not in text
    assert "Started" not in text
    assert "shown" in text
    assert log.tool_name == "unit-level"
