"""
Tests for structured logging (``ledger_kernel.logging_config``).

Covers:
- One JSON object per record with envelope, context, extra and error fields
- Ledger error details surfacing as exc_* fields
- LogContext scoping
- configure_logging / reset_logging lifecycle
"""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from ledger_kernel.domain.entities import CampaignStatus
from ledger_kernel.exceptions import InsufficientBalanceError, PlatformMismatchError
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _isolated_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def emitted():
    """Configure ledger logging into a buffer; returns a reader of parsed lines."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    configure_logging(handler=handler)

    def _read() -> list[dict]:
        return [json.loads(line) for line in stream.getvalue().splitlines() if line]

    return _read


log = get_logger("tests.logging")


class TestRecordShape:

    def test_envelope(self, emitted):
        log.info("fund_created")
        (record,) = emitted()
        assert record["message"] == "fund_created"
        assert record["level"] == "INFO"
        assert record["logger"] == "ledger_kernel.tests.logging"
        assert record["ts"].endswith("+00:00")

    def test_extra_fields_are_top_level(self, emitted):
        log.info("transfer_completed", extra={"from_fund_id": "1", "legs": 2})
        (record,) = emitted()
        assert record["from_fund_id"] == "1"
        assert record["legs"] == 2

    def test_money_and_status_values(self, emitted):
        log.info(
            "campaign_completed",
            extra={
                "profit": Decimal("6400.00"),
                "status": CampaignStatus.COMPLETED,
                "collections": frozenset({"fundsV2", "ad_clients"}),
            },
        )
        (record,) = emitted()
        assert record["profit"] == "6400.00"
        assert record["status"] == "completed"
        assert record["collections"] == ["ad_clients", "fundsV2"]

    def test_non_ascii_kept(self, emitted):
        log.info("client_seen", extra={"client_name": "ঢাকা Bakery"})
        (record,) = emitted()
        assert record["client_name"] == "ঢাকা Bakery"

    def test_below_default_level_dropped(self, emitted):
        log.debug("noisy")
        log.warning("kept")
        assert [r["message"] for r in emitted()] == ["kept"]


class TestContextFields:

    def test_bound_fields_appear(self, emitted):
        with LogContext.bind(correlation_id="abc-123", operation="transfer_funds"):
            log.info("inside")
        log.info("outside")
        inside, outside = emitted()
        assert inside["correlation_id"] == "abc-123"
        assert inside["operation"] == "transfer_funds"
        assert "correlation_id" not in outside
        assert "operation" not in outside

    def test_context_beats_extra_of_same_name(self, emitted):
        with LogContext.bind(operation="add_deposit"):
            log.info("clash", extra={"operation": "other"})
        (record,) = emitted()
        assert record["operation"] == "add_deposit"


class TestErrorFields:

    def test_plain_exception(self, emitted):
        try:
            raise ValueError("boom")
        except ValueError:
            log.error("failed", exc_info=True)
        (record,) = emitted()
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "exc_code" not in record
        assert "Traceback" in record["traceback"]

    def test_ledger_error_details(self, emitted):
        try:
            raise InsufficientBalanceError("fund", "1", Decimal("100"), Decimal("300"))
        except InsufficientBalanceError:
            log.warning("ledger_operation_rejected", exc_info=True)
        (record,) = emitted()
        assert record["exc_code"] == "INSUFFICIENT_BALANCE"
        assert record["exc_type"] == "InsufficientBalanceError"
        assert record["exc_entity_id"] == "1"
        assert record["exc_available"] == "100"
        assert record["exc_requested"] == "300"

    def test_platform_mismatch_details(self, emitted):
        try:
            raise PlatformMismatchError("acc-g", "google", "facebook")
        except PlatformMismatchError:
            log.warning("ledger_operation_rejected", exc_info=True)
        (record,) = emitted()
        assert record["exc_code"] == "PLATFORM_MISMATCH"
        assert "exc_args" not in record


class TestLogContext:

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", entity_id="y")
        assert LogContext.get_all() == {"correlation_id": "x", "entity_id": "y"}

    def test_set_merges(self):
        LogContext.set(correlation_id="x")
        LogContext.set(actor_id="u-1", correlation_id=None)
        assert LogContext.get_all() == {"correlation_id": "x", "actor_id": "u-1"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_restores_previous_value(self):
        LogContext.set(correlation_id="outer")
        with LogContext.bind(correlation_id="inner", operation="add_deposit"):
            assert LogContext.get_all() == {"correlation_id": "inner", "operation": "add_deposit"}
        assert LogContext.get_all() == {"correlation_id": "outer"}

    def test_bind_restores_after_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(operation="cancel_campaign"):
                raise RuntimeError("fail")
        assert LogContext.get_all() == {}

    def test_bind_ignores_none_values(self):
        with LogContext.bind(actor_id=None, operation="cancel_campaign"):
            assert LogContext.get_all() == {"operation": "cancel_campaign"}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError, match="fund_id"):
            LogContext.set(fund_id="1")

    def test_get_all_returns_copy(self):
        LogContext.set(operation="x")
        LogContext.get_all()["operation"] = "y"
        assert LogContext.get_all() == {"operation": "x"}


def _structured_handlers() -> list[logging.Handler]:
    return [
        h for h in logging.getLogger("ledger_kernel").handlers
        if isinstance(h.formatter, StructuredFormatter)
    ]


class TestConfigureLogging:

    def test_second_call_is_noop(self):
        configure_logging(handler=logging.NullHandler())
        configure_logging(handler=logging.NullHandler())
        assert len(_structured_handlers()) == 1

    def test_isolated_from_root(self):
        configure_logging(handler=logging.NullHandler())
        assert logging.getLogger("ledger_kernel").propagate is False

    def test_level_by_name(self):
        configure_logging(handler=logging.NullHandler(), level="DEBUG")
        assert logging.getLogger("ledger_kernel").level == logging.DEBUG

    def test_reset_allows_reconfiguration(self):
        configure_logging(handler=logging.NullHandler())
        reset_logging()
        assert _structured_handlers() == []
        configure_logging(handler=logging.NullHandler())
        assert len(_structured_handlers()) == 1
