"""Tests for the structured logging system (inventory_kernel/logging_config.py)."""

import json
import logging
from datetime import UTC, datetime
from io import StringIO

import pytest

from inventory_kernel.domain.statuses import AgeGroup, ItemStatus
from inventory_kernel.exceptions import ItemNotFoundError, ValidationError
from inventory_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "inventory_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info(
            "item_status_changed", extra={"from_status": "ordered", "to_status": "received"}
        )

        record = _parse_log(stream)
        assert record["from_status"] == "ordered"
        assert record["to_status"] == "received"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(correlation_id="abc-123", item_id="JRS-1A2B3C4D")
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["item_id"] == "JRS-1A2B3C4D"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("test").error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_kernel_exception_fields_extracted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ValidationError("quantity", "must be at least 1, got 0")
        except ValidationError:
            get_logger("test").error("rejected", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "VALIDATION_ERROR"
        assert record["exc_field"] == "quantity"
        assert record["exc_reason"] == "must be at least 1, got 0"

    def test_not_found_carries_item_id(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ItemNotFoundError("JRS-DEADBEEF")
        except ItemNotFoundError:
            get_logger("test").warning("lookup_failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "ITEM_NOT_FOUND"
        assert record["exc_item_id"] == "JRS-DEADBEEF"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "item_id" not in record

    def test_datetime_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        when = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        get_logger("test").info("stamped", extra={"changed_at": when})

        assert _parse_log(stream)["changed_at"] == "2024-01-01T12:00:00+00:00"

    def test_status_enums_logged_as_values(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info(
            "item_status_changed",
            extra={"to_status": ItemStatus.RECEIVED, "age_group": AgeGroup.YOUTH},
        )

        record = _parse_log(stream)
        assert record["to_status"] == "received"
        assert record["age_group"] == "Youth"

    def test_context_wins_over_extra(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        with LogContext.bind(item_id="JRS-CONTEXT1"):
            get_logger("test").info("msg", extra={"item_id": "JRS-EXTRA001"})

        assert _parse_log(stream)["item_id"] == "JRS-CONTEXT1"

    def test_level_filters_debug(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        assert [r["message"] for r in logs] == ["first", "second"]


# ---------------------------------------------------------------------------
# LogContext
# ---------------------------------------------------------------------------


class TestLogContext:
    def test_set_and_get(self):
        LogContext.set(correlation_id="x", operation="set_status")
        assert LogContext.get_all() == {"correlation_id": "x", "operation": "set_status"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_restores(self):
        LogContext.set(batch_id="outer")
        with LogContext.bind(batch_id="inner", source_row="7"):
            assert LogContext.get_all() == {"batch_id": "inner", "source_row": "7"}
        assert LogContext.get_all() == {"batch_id": "outer"}

    def test_bind_skips_none(self):
        LogContext.set(item_id="JRS-1")
        with LogContext.bind(item_id=None, operation="bulk_apply"):
            assert LogContext.get_all()["item_id"] == "JRS-1"
        assert "operation" not in LogContext.get_all()

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError, match="event_id"):
            LogContext.set(event_id="x")
        with pytest.raises(TypeError):
            with LogContext.bind(actor_id="x"):
                pass

    def test_nested_bind_restores_each_level(self):
        with LogContext.bind(operation="import_batch", batch_id="b1"):
            with LogContext.bind(source_row="2"):
                with LogContext.bind(source_row="3", item_id="JRS-1"):
                    assert LogContext.get_all()["source_row"] == "3"
                assert LogContext.get_all() == {
                    "operation": "import_batch",
                    "batch_id": "b1",
                    "source_row": "2",
                }
        assert LogContext.get_all() == {}

    def test_all_fields(self):
        LogContext.set(
            correlation_id="c",
            item_id="i",
            operation="o",
            batch_id="b",
            source_row="2",
        )
        assert len(LogContext.get_all()) == 5


# ---------------------------------------------------------------------------
# configure_logging
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)
        assert logging.getLogger("inventory_kernel").handlers == [h1]

    def test_string_level(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level="debug")
        get_logger("deep.nested.module").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["logger"] == "inventory_kernel.deep.nested.module"

    def test_unknown_level_falls_back_to_info(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level="chatty")
        logger = get_logger("test")
        logger.debug("hidden")
        logger.info("shown")
        assert [r["message"] for r in _parse_all_logs(stream)] == ["shown"]

    def test_reset_clears_handlers(self):
        handler, _ = _make_handler()
        configure_logging(handler=handler)
        reset_logging()
        assert logging.getLogger("inventory_kernel").handlers == []
