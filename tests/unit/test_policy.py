"""Tests for balance policy defaults and rate blending."""

from decimal import Decimal

import pytest

from ledger_kernel.domain.policy import (
    BalanceKind,
    BalancePolicy,
    RateAveraging,
    blend_rate,
)


class TestBalancePolicy:

    def test_defaults(self):
        policy = BalancePolicy()
        assert policy.allows_negative(BalanceKind.FUND_ON_TRANSACTION) is True
        assert policy.allows_negative(BalanceKind.FUND_ON_TRANSFER) is False
        assert policy.allows_negative(BalanceKind.CLIENT_AD_BALANCE) is True
        assert policy.allows_negative(BalanceKind.AD_ACCOUNT_BALANCE) is True

    def test_every_kind_has_a_flag(self):
        policy = BalancePolicy()
        for kind in BalanceKind:
            assert isinstance(policy.allows_negative(kind), bool)

    def test_frozen(self):
        policy = BalancePolicy()
        with pytest.raises(AttributeError):
            policy.fund_on_transfer = True


class TestBlendRate:

    def test_last_observed_overwrites(self):
        rate = blend_rate(
            RateAveraging.LAST_OBSERVED, Decimal("100"), Decimal("118"), Decimal("50"), Decimal("125")
        )
        assert rate == Decimal("125")

    def test_weighted_blends_by_balance(self):
        # (100*118 + 100*122) / 200
        rate = blend_rate(
            RateAveraging.WEIGHTED, Decimal("100"), Decimal("118"), Decimal("100"), Decimal("122")
        )
        assert rate == Decimal("120")

    def test_weighted_without_prior_rate(self):
        rate = blend_rate(RateAveraging.WEIGHTED, Decimal("100"), None, Decimal("10"), Decimal("130"))
        assert rate == Decimal("130")

    @pytest.mark.parametrize("old_balance", [Decimal("0"), Decimal("-40")])
    def test_weighted_ignores_empty_or_overdrawn_balance(self, old_balance):
        rate = blend_rate(
            RateAveraging.WEIGHTED, old_balance, Decimal("118"), Decimal("10"), Decimal("130")
        )
        assert rate == Decimal("130")
