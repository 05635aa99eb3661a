"""
Values -- decimal coercion and rounding for ledger amounts.

Responsibility:
    The single place where caller-supplied numbers become ``Decimal`` and
    where amounts are rounded.  Every ledger function goes through these
    helpers so that USD amounts, BDT amounts and BDT/USD rates are handled
    the same way everywhere.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - All monetary amounts are ``Decimal`` (never float arithmetic).
    - USD and BDT amounts round to 2 places with ROUND_HALF_UP.
    - Rates are kept at full precision; rounding them is display-only.

Failure modes:
    - InvalidAmountError when a value is missing, not a finite number, or
      (for ``require_positive``) zero or negative.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ledger_kernel.exceptions import InvalidAmountError

MONEY_DECIMAL_PLACES = 2
RATE_DISPLAY_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


def to_decimal(value: object, field: str = "amount") -> Decimal:
    """
    Coerce a caller-supplied number into a finite ``Decimal``.

    Floats are converted through ``str`` so ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.

    Raises:
        InvalidAmountError: value is None, a bool, not numeric, NaN or infinite.
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmountError(field, value)
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise InvalidAmountError(field, value) from e
    if not result.is_finite():
        raise InvalidAmountError(field, value)
    return result


def require_positive(value: object, field: str = "amount") -> Decimal:
    """Coerce ``value`` and reject anything that is not strictly positive."""
    result = to_decimal(value, field)
    if result <= ZERO:
        raise InvalidAmountError(field, value)
    return result


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    This is the only rounding function ledger code uses for amounts.
    """
    quantum = Decimal(1).scaleb(-decimal_places)
    return value.quantize(quantum, rounding=rounding)


def display_rate(rate: Decimal | None, decimal_places: int = RATE_DISPLAY_PLACES) -> Decimal:
    """Round a BDT/USD rate for display. Stored rates are never rounded."""
    return round_money(rate if rate is not None else ZERO, decimal_places)


def percentage_change(current: Decimal, previous: Decimal) -> Decimal:
    """
    Percentage change from ``previous`` to ``current``.

    A zero baseline reports 100 when there is any current value and 0
    otherwise, matching the dashboard cards.
    """
    if previous == ZERO:
        return Decimal("100") if current > ZERO else ZERO
    return (current - previous) / previous * Decimal("100")
