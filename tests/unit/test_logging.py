"""Unit tests for logging configuration."""

import json
import logging

from sessionvault.logging_config import (
    REDACTED,
    JsonFormatter,
    RedactingFilter,
    RequestIdFilter,
    redact,
    request_id_var,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("sessionvault.test", logging.INFO, __file__, 1, "Login", (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRedaction:
    """Credential fields never reach a log sink."""

    def test_redact(self):
        assert redact("password", "Str0ng!Pass") == REDACTED
        assert redact("Refresh_Token", "abc.def.ghi") == REDACTED
        assert redact("subject_id", 42) == 42

    def test_redacting_filter(self):
        record = make_record(password="Str0ng!Pass", access_token="abc", subject_id=3)

        RedactingFilter().filter(record)

        assert record.password == REDACTED
        assert record.access_token == REDACTED
        assert record.subject_id == 3

    def test_json_formatter(self):
        record = make_record(refresh_token="abc.def.ghi", subject_id=9)
        token = request_id_var.set("req-123")
        try:
            RequestIdFilter().filter(record)
        finally:
            request_id_var.reset(token)

        output = json.loads(JsonFormatter().format(record))

        assert output["message"] == "Login"
        assert output["request_id"] == "req-123"
        assert output["refresh_token"] == REDACTED
        assert output["subject_id"] == 9
