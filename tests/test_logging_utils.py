from __future__ import annotations

import json
import logging

from chat_relay.logging_utils import CustomJsonFormatter, request_id_ctx


def _format(record: logging.LogRecord) -> dict[str, object]:
    formatter = CustomJsonFormatter("%(ts)s %(level)s %(name)s %(message)s")
    return json.loads(formatter.format(record))


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("chat_relay.test", logging.WARNING, __file__, 1, "hello", None, None)
    record.__dict__.update(extra)
    return record


def test_json_line_fields() -> None:
    data = _format(_record(phone="5511999990000"))

    assert data["message"] == "hello"
    assert data["level"] == "WARNING"
    assert data["name"] == "chat_relay.test"
    assert str(data["ts"]).endswith("Z")
    assert data["phone"] == "5511999990000"
    assert "request_id" not in data


def test_request_id_from_context() -> None:
    token = request_id_ctx.set("req-123")
    try:
        data = _format(_record())
    finally:
        request_id_ctx.reset(token)

    assert data["request_id"] == "req-123"
