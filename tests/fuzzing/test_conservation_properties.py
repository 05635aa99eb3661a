"""
Property-based tests for balance conservation in the pure ledger functions.

Verifies:
- transfer_funds never changes the total across funds
- apply_transaction followed by delete_transactions restores every fund
- add_deposit credits the client by exactly the deposit's amount_usd
- complete_campaign debits client and ad account by the same spend
- campaign_profit is always rounded to two decimal places
"""

import itertools
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.entities import (
    AdAccount,
    Campaign,
    CampaignStatus,
    Client,
    Fund,
    Transaction,
    TransactionType,
)
from ledger_kernel.domain.policy import BalancePolicy
from ledger_kernel.exceptions import InsufficientBalanceError
from ledger_modules.ads.ledger import add_deposit, campaign_profit, complete_campaign
from ledger_modules.finance.ledger import (
    apply_transaction,
    delete_transactions,
    transfer_funds,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

amounts = st.decimals(
    min_value=Decimal("0.01"),
    max_value=Decimal("1000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
balances = st.decimals(
    min_value=Decimal("-100000"),
    max_value=Decimal("1000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
rates = st.decimals(
    min_value=Decimal("50"),
    max_value=Decimal("200"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
# Even at the highest rate every deposit converts to at least one cent.
deposits_bdt = st.decimals(
    min_value=Decimal("1"),
    max_value=Decimal("1000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
fund_ids = st.sampled_from(["1", "2", "3"])


def _ids():
    counter = itertools.count(1)
    return lambda: f"p-{next(counter)}"


def _funds(a, b, c):
    return (
        Fund("1", "Main Account", a),
        Fund("2", "Tax Fund", b),
        Fund("3", "Savings", c),
    )


def _total(funds) -> Decimal:
    return sum((f.balance for f in funds), Decimal("0"))


class TestTransferConservation:

    @given(a=balances, b=balances, c=balances, amount=amounts, src=fund_ids, dst=fund_ids)
    @settings(max_examples=200)
    def test_total_unchanged(self, a, b, c, amount, src, dst):
        funds = _funds(a, b, c)
        if src == dst:
            return
        policy = BalancePolicy(fund_on_transfer=True)
        next_funds, txns, outgoing, incoming = transfer_funds(
            src, dst, amount, funds, (), DeterministicClock(NOW), _ids(), policy
        )
        assert _total(next_funds) == _total(funds)
        assert outgoing.amount == incoming.amount == amount
        assert txns == (incoming, outgoing)

    @given(balance=balances, amount=amounts)
    @settings(max_examples=200)
    def test_default_policy_never_overdraws_source(self, balance, amount):
        funds = _funds(balance, Decimal("0"), Decimal("0"))
        try:
            next_funds, _, _, _ = transfer_funds(
                "1", "2", amount, funds, (), DeterministicClock(NOW), _ids()
            )
        except InsufficientBalanceError:
            assert balance < amount
        else:
            assert next_funds[0].balance >= 0


class TestApplyDeleteRoundTrip:

    @given(
        entries=st.lists(
            st.tuples(st.sampled_from(list(TransactionType)), amounts, fund_ids),
            min_size=1,
            max_size=12,
        ),
        data=st.data(),
    )
    @settings(max_examples=150, suppress_health_check=[HealthCheck.too_slow])
    def test_delete_restores_balances(self, entries, data):
        start = _funds(Decimal("1000"), Decimal("200"), Decimal("0"))
        funds, txns = start, ()
        for i, (type_, amount, fund_id) in enumerate(entries):
            txn = Transaction(
                id=f"t-{i}",
                type=type_,
                description=type_.value,
                amount=amount,
                category="Other",
                date=NOW,
                fund_id=fund_id,
            )
            funds, txns = apply_transaction(txn, funds, txns)

        doomed = data.draw(st.sets(st.sampled_from([t.id for t in txns])))
        remaining, after = delete_transactions(doomed, txns, funds)

        # Undoing the survivors too must land exactly on the start balances.
        _, restored = delete_transactions([t.id for t in remaining], remaining, after)
        assert restored == start
        assert {t.id for t in remaining}.isdisjoint(doomed)


class TestDepositCredit:

    @given(balance=balances, bdt=deposits_bdt, rate=rates)
    @settings(max_examples=200)
    def test_balance_moves_by_amount_usd(self, balance, bdt, rate):
        clients = (Client("c-1", "Acme Bakery", balance, None),)
        (client,), deposit = add_deposit(
            "c-1", bdt, rate, clients, DeterministicClock(NOW), _ids()
        )
        assert client.ad_balance_usd - balance == deposit.amount_usd
        assert deposit.amount_usd == (bdt / rate).quantize(Decimal("0.01"), ROUND_HALF_UP)
        assert client.avg_deposit_rate == rate


class TestCompletionSettlement:

    @given(
        client_balance=balances,
        account_balance=balances,
        spend=amounts,
        client_rate=rates,
        account_rate=rates,
    )
    @settings(max_examples=200)
    def test_client_and_account_debited_by_spend(
        self, client_balance, account_balance, spend, client_rate, account_rate
    ):
        campaign = Campaign(
            id="cmp-1",
            name="Launch",
            client_id="c-1",
            platform_id="facebook",
            status=CampaignStatus.RUNNING,
            budget_usd=Decimal("1000"),
            created_at=NOW,
        )
        clients = (Client("c-1", "Acme Bakery", client_balance, client_rate),)
        accounts = (AdAccount("acc-fb", "Agency FB 1", "facebook", account_balance, account_rate),)

        (done,), (client,), (account,), record = complete_campaign(
            "cmp-1", spend, "acc-fb", (campaign,), clients, accounts,
            DeterministicClock(NOW), _ids(),
        )
        assert client_balance - client.ad_balance_usd == spend
        assert account_balance - account.balance_usd == spend
        assert record.amount_usd == spend
        assert done.profit == campaign_profit(spend, client_rate, account_rate)


class TestProfitRounding:

    @given(spend=amounts, client_rate=rates, account_rate=rates)
    @settings(max_examples=200)
    def test_two_decimal_places(self, spend, client_rate, account_rate):
        profit = campaign_profit(spend, client_rate, account_rate)
        assert profit.as_tuple().exponent == -2
        assert abs(profit - spend * (client_rate - account_rate)) <= Decimal("0.005")

    @pytest.mark.parametrize("client_rate, account_rate", [(None, Decimal("122")), (None, None)])
    def test_missing_rate_counts_as_zero(self, client_rate, account_rate):
        profit = campaign_profit(Decimal("10"), client_rate, account_rate)
        expected = -Decimal("10") * (account_rate or Decimal("0"))
        assert profit == expected.quantize(Decimal("0.01"), ROUND_HALF_UP)
