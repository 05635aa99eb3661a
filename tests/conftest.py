"""
Pytest fixtures for the agency ledger test suite.

Provides:
- An in-memory SQLite engine with the collection table, fresh per test
- A deterministic clock and sequential id factory
- Wired ledger services over a test configuration
- A standard ledger (funds, clients, ad accounts, one pending campaign)
- Structured log capture
"""

import itertools
import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from ledger_config.schema import LedgerConfig
from ledger_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.entities import (
    AdAccount,
    Campaign,
    CampaignStatus,
    Client,
    Fund,
)
from ledger_kernel.domain.snapshot import Collection
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_modules.runtime import build_services

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, services):
            services.finance.transfer_funds(...)
            logs = captured_logs()
            assert any(r["message"] == "transfer_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Time and ids
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Sequential ids: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with the collection table."""
    eng = init_engine_from_url("sqlite://")
    create_tables()
    yield eng
    reset_engine()


@pytest.fixture
def session_factory(engine):
    return get_session_factory()


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def ledger_config() -> LedgerConfig:
    return LedgerConfig(config_id="test-ledger", version="1")


@pytest.fixture
def services(ledger_config, session_factory, deterministic_clock, id_factory):
    return build_services(
        ledger_config,
        session_factory=session_factory,
        clock=deterministic_clock,
        id_factory=id_factory,
    )


@pytest.fixture
def seed_ledger(services, session_factory):
    """
    Write entities straight into the store, bypassing the ledger.

    Usage::

        seed_ledger(funds=[Fund("1", "Main Account", Decimal("100"))])
    """

    def _seed(**collections) -> None:
        store = services.uow.store
        with session_scope(session_factory) as session:
            for name, entities in collections.items():
                store.save(session, Collection(name), entities)

    return _seed


@pytest.fixture
def raw_payloads(services, session_factory):
    """Stored JSON text of every collection, for byte-for-byte comparisons."""

    def _read() -> dict[Collection, str | None]:
        store = services.uow.store
        with session_scope(session_factory) as session:
            return {c: store.raw_payload(session, c) for c in Collection}

    return _read


@pytest.fixture
def standard_ledger(seed_ledger, services):
    """
    Funds 1000 / 200 / 0, two clients, a facebook and a google ad account,
    and one pending facebook campaign for client c-1.
    """
    seed_ledger(
        funds=[
            Fund("1", "Main Account", Decimal("1000")),
            Fund("2", "Tax Fund", Decimal("200")),
            Fund("3", "Savings", Decimal("0")),
        ],
        transactions=[],
        clients=[
            Client("c-1", "Acme Bakery", Decimal("0"), None),
            Client("c-2", "Northwind", Decimal("50"), Decimal("118")),
        ],
        ad_accounts=[
            AdAccount("acc-fb", "Agency FB 1", "facebook", Decimal("5000"), Decimal("122")),
            AdAccount("acc-g", "Agency Google", "google", Decimal("800"), Decimal("125")),
        ],
        ad_transactions=[],
        campaigns=[
            Campaign(
                id="cmp-1",
                name="Spring launch",
                client_id="c-1",
                platform_id="facebook",
                status=CampaignStatus.PENDING,
                budget_usd=Decimal("1000"),
                created_at=FIXED_NOW,
            ),
        ],
    )
    return services
