# tests/test_logging_config.py
from __future__ import annotations

import json
import logging

from lease_engine.logging_config import JsonFormatter
from lease_engine.middleware.request_id import request_id_ctx


def _record(msg: str = "lease.issued", **extra) -> logging.LogRecord:
    rec = logging.LogRecord("lease_engine.services", logging.INFO, __file__, 1, msg, None, None)
    for k, v in extra.items():
        setattr(rec, k, v)
    return rec


def test_json_line_carries_structured_extras():
    line = JsonFormatter().format(_record(application_id=7, lease_id=3, unrelated="x"))
    payload = json.loads(line)
    assert payload["message"] == "lease.issued"
    assert payload["level"] == "INFO"
    assert payload["application_id"] == 7
    assert payload["lease_id"] == 3
    assert "unrelated" not in payload


def test_request_id_from_context():
    token = request_id_ctx.set("rid-123")
    try:
        payload = json.loads(JsonFormatter().format(_record()))
    finally:
        request_id_ctx.reset(token)
    assert payload["request_id"] == "rid-123"


def test_request_id_from_record_outside_request():
    payload = json.loads(JsonFormatter().format(_record(http_request_id="rid-9")))
    assert payload["request_id"] == "rid-9"


def test_unsafe_incoming_request_id_is_replaced():
    from lease_engine.middleware.request_id import resolve_request_id

    assert resolve_request_id("abc-123") == "abc-123"
    minted = resolve_request_id("bad id\nwith newline")
    assert minted != "bad id\nwith newline"
    assert len(minted) == 36
    assert len(resolve_request_id(None)) == 36


def test_request_id_round_trips_through_api(client):
    r = client.get("/api/health", headers={"X-Request-ID": "req-42"})
    assert r.headers["X-Request-ID"] == "req-42"
