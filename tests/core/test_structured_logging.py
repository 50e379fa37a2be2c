"""JSON log output must stay machine-parseable and carry request fields."""

from __future__ import annotations

import json
import logging
import sys

from app.core.logging import _ContainerFormatter, _JsonFormatter


def _record(msg: str = "hello %s", args: tuple = ("world",), **kw) -> logging.LogRecord:
    return logging.LogRecord(
        name=kw.pop("name", "app.services.users_service"),
        level=kw.pop("level", logging.INFO),
        pathname="users_service.py",
        lineno=10,
        msg=msg,
        args=args,
        exc_info=kw.pop("exc_info", None),
    )


def test_json_formatter_produces_valid_json() -> None:
    parsed = json.loads(_JsonFormatter().format(_record()))
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "app.services.users_service"
    assert parsed["message"] == "hello world"
    assert "timestamp" in parsed


def test_json_formatter_includes_request_fields() -> None:
    record = _record("GET /users → 200", ())
    record.request_id = "abc-123"  # type: ignore[attr-defined]
    record.method = "GET"  # type: ignore[attr-defined]
    record.path = "/users"  # type: ignore[attr-defined]
    record.status_code = 200  # type: ignore[attr-defined]
    record.duration_ms = 3.5  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["request_id"] == "abc-123"
    assert parsed["method"] == "GET"
    assert parsed["path"] == "/users"
    assert parsed["status_code"] == 200
    assert parsed["duration_ms"] == 3.5


def test_json_formatter_omits_absent_fields() -> None:
    parsed = json.loads(_JsonFormatter().format(_record()))
    assert "request_id" not in parsed
    assert "duration_ms" not in parsed


def test_json_formatter_includes_exception_info() -> None:
    try:
        raise RuntimeError("store exploded")
    except RuntimeError:
        record = _record("failed", (), level=logging.ERROR, exc_info=sys.exc_info())
    parsed = json.loads(_JsonFormatter().format(record))
    assert "RuntimeError: store exploded" in parsed["exception"]


def test_container_formatter_is_not_json() -> None:
    output = _ContainerFormatter().format(_record("server started", (), name="app.main"))
    assert "INFO" in output
    assert "app.main" in output
    assert "server started" in output
    try:
        json.loads(output)
        raise AssertionError("Container format should not be valid JSON")
    except json.JSONDecodeError:
        pass
