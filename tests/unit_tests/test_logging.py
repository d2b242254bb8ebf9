"""Test suite for logger configuration and credential masking."""

import io
import json
import sys
from unittest.mock import patch

import pytest

from tenantdb_api.monitoring.logger import configure_logger
from tenantdb_api.monitoring.logger import get_formatted_stacktrace
from tenantdb_api.monitoring.logger import mask_connection_string
from tenantdb_api.monitoring.logger import process_log_record


class TestMaskConnectionString:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Server=s;Password=pw;User ID=sa", "Server=s;Password=***;User ID=sa"),
            ("Server=s;pwd=pw", "Server=s;pwd=***"),
            ("Password=pw", "Password=***"),
            ("Server=s;Password={a;b};Database=x", "Server=s;Password=***;Database=x"),
            ("Server=s;Password='a;b'", "Server=s;Password=***"),
            ("Login failed: Password=pw\nnext line", "Login failed: Password=***\nnext line"),
            ("Server=s;Database=x", "Server=s;Database=x"),
            ("", ""),
        ],
    )
    def test_masks_password_values(self, raw, expected):
        assert mask_connection_string(raw) == expected

    def test_none_passes_through(self):
        assert mask_connection_string(None) is None


class TestProcessLogRecord:
    def test_extra_serialized_to_json(self):
        record = {"extra": {"database": "Acme", "attempt": 2}, "exception": None}

        processed = process_log_record(record)

        assert json.loads(processed["extra"]) == {"database": "Acme", "attempt": 2}
        assert processed["stacktrace"] == ""

    def test_exception_flattened_to_one_line(self):
        try:
            raise ValueError("boom")
        except ValueError:
            exc_info = sys.exc_info()

        record = {"extra": {}, "exception": exc_info}
        processed = process_log_record(record)

        assert "ValueError: boom" in processed["stacktrace"]
        assert "\n" not in processed["stacktrace"]

    def test_get_formatted_stacktrace_keeps_newlines_when_asked(self):
        try:
            raise RuntimeError("kept")
        except RuntimeError:
            exc_info = sys.exc_info()

        stacktrace = get_formatted_stacktrace(exc_info, replace_newline_character_with_carriage_return=False)

        assert "\n" in stacktrace


def test_configure_logger_writes_structured_extra():
    from loguru import logger

    stream = io.StringIO()
    with patch("sys.stdout", new=stream):
        configure_logger(log_level="DEBUG")
        logger.info("Database created", database="Acme")

    out = stream.getvalue()
    assert "Database created" in out
    assert '"database": "Acme"' in out

    configure_logger()
