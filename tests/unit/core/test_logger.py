"""
Unit tests for core.logger module.

Tests:
- format_kv_pairs() quoting, escaping, truncation, and prefix
- Logger levels routed to the stdlib logger with structured_kv extras
- JSON output mode
- Disabled levels skipped
- StructuredFormatter rendering of structured and plain records
"""

import json
import logging

import pytest

from uns.core.logger import Logger, StructuredFormatter, format_kv_pairs


# ============================================================================
# format_kv_pairs Tests
# ============================================================================


class TestFormatKvPairs:
    def test_empty(self) -> None:
        assert format_kv_pairs({}) == ""

    def test_simple_values(self) -> None:
        assert format_kv_pairs({"network": "alice", "count": 3}) == " network=alice count=3"

    def test_quotes_spaces(self) -> None:
        assert format_kv_pairs({"error": "no record"}) == ' error="no record"'

    def test_quotes_equals_sign(self) -> None:
        assert format_kv_pairs({"q": "x=1"}) == ' q="x=1"'

    def test_escapes_double_quotes(self) -> None:
        assert format_kv_pairs({"msg": 'say "hi"'}) == ' msg="say \\"hi\\""'

    def test_empty_value_quoted(self) -> None:
        assert format_kv_pairs({"v": ""}) == ' v=""'

    def test_truncation(self) -> None:
        result = format_kv_pairs({"v": "x" * 20}, max_value_length=5)
        assert "xxxxx...<truncated 15 chars>" in result

    def test_no_truncation_when_disabled(self) -> None:
        assert format_kv_pairs({"v": "x" * 20}, max_value_length=None) == " v=" + "x" * 20

    def test_custom_prefix(self) -> None:
        assert format_kv_pairs({"a": 1}, prefix=" | ") == " | a=1"


# ============================================================================
# Logger Tests
# ============================================================================


class TestLogger:
    def test_name(self) -> None:
        assert Logger("resolver").name == "resolver"

    @pytest.mark.parametrize(
        ("method", "level"),
        [
            ("debug", logging.DEBUG),
            ("info", logging.INFO),
            ("warning", logging.WARNING),
            ("error", logging.ERROR),
            ("critical", logging.CRITICAL),
        ],
    )
    def test_levels(self, caplog: pytest.LogCaptureFixture, method: str, level: int) -> None:
        logger = Logger("test_levels")
        with caplog.at_level(logging.DEBUG, logger="test_levels"):
            getattr(logger, method)("event_name", network="alice")
        record = caplog.records[-1]
        assert record.levelno == level
        assert record.getMessage() == "event_name"
        assert record.structured_kv == {"network": "alice"}  # type: ignore[attr-defined]

    def test_exception_includes_traceback(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_exception")
        with caplog.at_level(logging.ERROR, logger="test_exception"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.exception("failed")
        assert caplog.records[-1].exc_info is not None

    def test_disabled_level_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_disabled")
        with caplog.at_level(logging.WARNING, logger="test_disabled"):
            logger.debug("hidden")
        assert not [r for r in caplog.records if r.name == "test_disabled"]

    def test_long_values_truncated(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_truncate", max_value_length=4)
        with caplog.at_level(logging.INFO, logger="test_truncate"):
            logger.info("event", body="abcdefgh")
        assert caplog.records[-1].structured_kv["body"].startswith("abcd...")  # type: ignore[attr-defined]

    def test_json_output(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = Logger("test_json", json_output=True)
        with caplog.at_level(logging.INFO, logger="test_json"):
            logger.info("cache_swept", evicted=3)
        data = json.loads(caplog.records[-1].getMessage())
        assert data["message"] == "cache_swept"
        assert data["level"] == "info"
        assert data["service"] == "test_json"
        assert data["evicted"] == 3
        assert "timestamp" in data


# ============================================================================
# StructuredFormatter Tests
# ============================================================================


class TestStructuredFormatter:
    def _record(self, **extra: object) -> logging.LogRecord:
        record = logging.LogRecord("resolver", logging.INFO, __file__, 1, "resolve_succeeded", None, None)
        for k, v in extra.items():
            setattr(record, k, v)
        return record

    def test_structured_record(self) -> None:
        record = self._record(structured_kv={"url": "https://alice.blog"})
        assert StructuredFormatter().format(record) == (
            "info resolver resolve_succeeded url=https://alice.blog"
        )

    def test_plain_record(self) -> None:
        assert StructuredFormatter().format(self._record()) == "info resolver resolve_succeeded"
