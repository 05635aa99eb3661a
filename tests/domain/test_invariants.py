"""
Tests for the snapshot invariant checker (``ledger_kernel.invariants``).

A consistent snapshot yields no violations; each structural rule is then
broken on its own and must be reported.
"""

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

from ledger_kernel.domain.entities import (
    AdTransactionType,
    Campaign,
    CampaignStatus,
    ClientAdTransaction,
    Transaction,
    TransactionType,
)
from ledger_kernel.domain.snapshot import LedgerSnapshot
from ledger_kernel.invariants import ALL_LEDGER_INVARIANTS, LedgerInvariant, verify_snapshot

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _completed_campaign() -> Campaign:
    return Campaign(
        id="cmp-1",
        name="Launch",
        client_id="c-1",
        platform_id="facebook",
        status=CampaignStatus.COMPLETED,
        budget_usd=Decimal("1000"),
        created_at=NOW,
        actual_spend_usd=Decimal("800"),
        ad_account_id="acc-fb",
        profit=Decimal("6400.00"),
        completed_at=NOW,
    )


def _spend(campaign_id: str = "cmp-1", record_id: str = "s-1") -> ClientAdTransaction:
    return ClientAdTransaction(
        id=record_id,
        client_id="c-1",
        type=AdTransactionType.SPEND,
        amount_usd=Decimal("800"),
        transaction_date=NOW,
        campaign_id=campaign_id,
    )


class TestInvariantCatalogue:

    def test_all_invariants_listed(self):
        assert ALL_LEDGER_INVARIANTS == frozenset(LedgerInvariant)
        assert LedgerInvariant.SINGLE_SPEND_PER_CAMPAIGN in ALL_LEDGER_INVARIANTS


class TestVerifySnapshot:

    def test_consistent_snapshot_has_no_violations(self):
        snapshot = LedgerSnapshot(
            campaigns=(_completed_campaign(),),
            ad_transactions=(_spend(),),
        )
        assert verify_snapshot(snapshot) == []

    def test_empty_snapshot_is_consistent(self):
        assert verify_snapshot(LedgerSnapshot()) == []

    def test_non_positive_transaction_amount(self):
        txn = Transaction(
            id="t-1",
            type=TransactionType.EXPENSE,
            description="Refund",
            amount=Decimal("-5"),
            category="Other",
            date=NOW,
            fund_id="1",
        )
        violations = verify_snapshot(LedgerSnapshot(transactions=(txn,)))
        assert len(violations) == 1
        assert violations[0].startswith("positive_amounts")

    def test_completed_campaign_missing_fields(self):
        campaign = replace(_completed_campaign(), profit=None)
        violations = verify_snapshot(
            LedgerSnapshot(campaigns=(campaign,), ad_transactions=(_spend(),))
        )
        assert any(v.startswith("completion_fields") for v in violations)

    def test_open_campaign_with_completion_fields(self):
        campaign = replace(_completed_campaign(), status=CampaignStatus.RUNNING)
        violations = verify_snapshot(LedgerSnapshot(campaigns=(campaign,)))
        assert any("running campaign cmp-1" in v for v in violations)

    def test_completed_campaign_without_spend_record(self):
        violations = verify_snapshot(LedgerSnapshot(campaigns=(_completed_campaign(),)))
        assert any("has 0 spend records" in v for v in violations)

    def test_two_spend_records_for_one_campaign(self):
        violations = verify_snapshot(
            LedgerSnapshot(
                campaigns=(_completed_campaign(),),
                ad_transactions=(_spend(), _spend(record_id="s-2")),
            )
        )
        assert any("has 2 spend records" in v for v in violations)

    def test_spend_for_campaign_that_is_not_completed(self):
        violations = verify_snapshot(LedgerSnapshot(ad_transactions=(_spend("ghost"),)))
        assert violations == [
            "single_spend_per_campaign: spend for campaign ghost which is not completed"
        ]
