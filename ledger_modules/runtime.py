"""
Service assembly (``ledger_modules.runtime``).

Builds the collection store, the shared unit of work and the three ledger
services from one ``LedgerConfig``.  Every caller (CLI, tests, an API
layer) wires the ledger through ``build_services`` so the services share
one writer lock and one configuration.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.orm import Session, sessionmaker

from ledger_config.schema import LedgerConfig
from ledger_kernel.db.collection_store import CollectionStore
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.services.unit_of_work import LedgerUnitOfWork
from ledger_modules.ads.service import AdSpendLedgerService
from ledger_modules.finance.service import FinanceLedgerService
from ledger_modules.reporting.service import ReportingService


@dataclass(frozen=True)
class LedgerServices:
    """The services of one ledger, sharing a single unit of work."""

    config: LedgerConfig
    uow: LedgerUnitOfWork
    finance: FinanceLedgerService
    ads: AdSpendLedgerService
    reporting: ReportingService


def build_services(
    config: LedgerConfig,
    session_factory: sessionmaker[Session] | None = None,
    clock: Clock | None = None,
    id_factory: Callable[[], str] | None = None,
) -> LedgerServices:
    """
    Wire the ledger services for ``config``.

    ``session_factory`` defaults to the module-level factory set up by
    ``init_engine_from_url``.
    """
    clock = clock or SystemClock()
    store = CollectionStore(config.collection_names, config.seeds)
    uow = LedgerUnitOfWork(
        store,
        session_factory=session_factory,
        clock=clock,
        verify_invariants=config.verify_invariants_on_commit,
    )
    return LedgerServices(
        config=config,
        uow=uow,
        finance=FinanceLedgerService(
            uow,
            clock=clock,
            policy=config.balance_policy,
            transfer_category=config.transfer_category,
            id_factory=id_factory,
        ),
        ads=AdSpendLedgerService(
            uow,
            clock=clock,
            policy=config.balance_policy,
            rate_averaging=config.rate_averaging,
            usd_decimal_places=config.usd_decimal_places,
            id_factory=id_factory,
        ),
        reporting=ReportingService(
            uow,
            clock=clock,
            low_balance_threshold_usd=config.low_balance_threshold_usd,
            decimal_places=config.usd_decimal_places,
            rate_display_places=config.rate_display_places,
        ),
    )
