"""Structured logging: JSON lines, request context, unit-of-work correlation."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from workforce_kernel.db.engine import session_scope
from workforce_kernel.domain.leave import LeaveRequestStatus
from workforce_kernel.exceptions import InsufficientBalanceError
from workforce_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests, then restore the suite config."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


@pytest.fixture
def json_lines():
    """Configure the namespace with an in-memory handler; returns a reader."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)

    def _read() -> list[dict]:
        return [json.loads(line) for line in stream.getvalue().splitlines() if line]

    def _configure(level: int = logging.INFO):
        configure_logging(handler=handler, level=level)
        return _read

    return _configure


class TestStructuredFormatter:
    def test_one_json_object_per_line(self, json_lines):
        read = json_lines()
        get_logger("services.time_entry").info("time_entry_submitted")

        [record] = read()
        assert record["level"] == "INFO"
        assert record["message"] == "time_entry_submitted"
        assert record["logger"] == "workforce_kernel.services.time_entry"
        assert record["ts"].endswith("+00:00")

    def test_extra_fields_are_typed(self, json_lines):
        read = json_lines()
        entry_id = uuid4()
        get_logger("test").info(
            "deduction_posted",
            extra={
                "year": 2025,
                "days": Decimal("2.5"),
                "entry_id": entry_id,
                "status": LeaveRequestStatus.APPROVED,
            },
        )

        [record] = read()
        assert record["year"] == 2025
        assert record["days"] == "2.5"
        assert record["entry_id"] == str(entry_id)
        assert record["status"] == "approved"

    def test_context_fields_included(self, json_lines):
        read = json_lines()
        LogContext.set(correlation_id="abc-123", entity_type="leave_request")
        get_logger("test").info("leave_request_created")

        [record] = read()
        assert record["correlation_id"] == "abc-123"
        assert record["entity_type"] == "leave_request"
        assert "entity_id" not in record

    def test_plain_exception(self, json_lines):
        read = json_lines()
        try:
            raise ConnectionError("notification backend unreachable")
        except ConnectionError:
            get_logger("test").warning("notification_dispatch_failed", exc_info=True)

        [record] = read()
        assert record["exc_type"] == "ConnectionError"
        assert record["exc_message"] == "notification backend unreachable"
        assert "exc_code" not in record
        assert "Traceback" in record["traceback"]

    def test_kernel_exception_attributes(self, json_lines):
        read = json_lines()
        try:
            raise InsufficientBalanceError("emp-1", 2025, "cat-1", Decimal("15"), Decimal("13"))
        except InsufficientBalanceError:
            get_logger("test").error("ledger_error", exc_info=True)

        [record] = read()
        assert record["exc_code"] == "INSUFFICIENT_BALANCE"
        assert record["exc_employee_id"] == "emp-1"
        assert record["exc_year"] == 2025
        assert record["exc_requested"] == "15"
        assert record["exc_available"] == "13"

    def test_debug_filtered_at_default_level(self, json_lines):
        read = json_lines()
        logger = get_logger("test")
        logger.debug("notification_dispatched")
        logger.info("time_entry_created")
        logger.critical("ledger_row_missing")

        assert [r["message"] for r in read()] == ["time_entry_created", "ledger_row_missing"]

    def test_formatter_usable_standalone(self):
        record = logging.LogRecord("workforce_kernel.x", logging.INFO, "", 0, "event", (), None)
        assert json.loads(StructuredFormatter().format(record))["message"] == "event"


class TestLogContext:
    def test_set_ignores_none(self):
        LogContext.set(correlation_id="x", actor_id=None)
        assert LogContext.get_all() == {"correlation_id": "x"}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            LogContext.set(tenant_id="t-1")

    def test_bind_restores_previous_values(self):
        LogContext.set(correlation_id="outer")
        with LogContext.bind(correlation_id="inner", entity_id="req-1"):
            assert LogContext.get_all() == {"correlation_id": "inner", "entity_id": "req-1"}
        assert LogContext.get_all() == {"correlation_id": "outer"}

    def test_bind_restores_on_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(operation="decide"):
                raise RuntimeError
        assert LogContext.get_all() == {}

    def test_all_five_fields(self):
        LogContext.set(
            correlation_id="c", actor_id="a", entity_type="t", entity_id="e", operation="o",
        )
        assert set(LogContext.get_all()) == {
            "correlation_id", "actor_id", "entity_type", "entity_id", "operation",
        }


def _json_handlers() -> list[logging.Handler]:
    # The runner may hang its own capture handlers on the same logger.
    return [
        h for h in logging.getLogger("workforce_kernel").handlers
        if isinstance(h.formatter, StructuredFormatter)
    ]


class TestConfigureLogging:
    def test_idempotent(self, json_lines):
        json_lines()
        configure_logging(handler=logging.StreamHandler(StringIO()))
        assert len(_json_handlers()) == 1

    def test_reset_restores_warning_level(self, json_lines):
        json_lines(level=logging.DEBUG)
        reset_logging()
        assert _json_handlers() == []
        assert logging.getLogger("workforce_kernel").level == logging.WARNING

    def test_reset_leaves_foreign_handlers(self, json_lines):
        foreign = logging.NullHandler()
        namespace = logging.getLogger("workforce_kernel")
        namespace.addHandler(foreign)
        try:
            json_lines()
            reset_logging()
            assert foreign in namespace.handlers
        finally:
            namespace.removeHandler(foreign)

    def test_nested_loggers_share_the_handler(self, json_lines):
        read = json_lines(level=logging.DEBUG)
        get_logger("services.balance_ledger").debug("balance_open_race_retry")

        [record] = read()
        assert record["logger"] == "workforce_kernel.services.balance_ledger"


class TestUnitOfWorkCorrelation:
    def test_scope_binds_fresh_correlation_id(self, db_engine):
        with session_scope():
            inside = LogContext.get_all().get("correlation_id")

        assert inside
        assert "correlation_id" not in LogContext.get_all()

    def test_scope_keeps_caller_correlation_id(self, db_engine):
        with LogContext.bind(correlation_id="req-42"):
            with session_scope():
                assert LogContext.get_all()["correlation_id"] == "req-42"

    def test_rollback_logged_and_reraised(self, db_engine, json_lines):
        read = json_lines()

        with pytest.raises(ValueError):
            with session_scope():
                raise ValueError("portal call failed")

        [record] = [r for r in read() if r["message"] == "unit_of_work_rolled_back"]
        assert record["level"] == "WARNING"
        assert record["exc_type"] == "ValueError"
        assert record["correlation_id"]
