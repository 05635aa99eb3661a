"""
Module: ledger_kernel.db.codec
Responsibility: Convert ledger entities to and from the JSON records stored
    in each collection.  Field names follow the dashboard's stored format
    (camelCase: ``adBalanceUSD``, ``fundId``, ...) so existing collections
    load unchanged.
Architecture position: Kernel > DB.  May import from domain/.  Used by the
    collection store only.

Invariants enforced:
    - Decimals are written as strings and read back from strings or numbers
      without passing through float.
    - Timestamps are written as ISO 8601; naive values read back as UTC.
    - Keys the ledger does not model are preserved in ``extra`` and written
      back untouched.

Failure modes:
    - ValueError / KeyError from a malformed record; the collection store
      wraps these in CollectionDecodeError with the collection name.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable

from ledger_kernel.domain.entities import (
    AdAccount,
    AdTransactionType,
    Campaign,
    CampaignStatus,
    Client,
    ClientAdTransaction,
    Fund,
    Transaction,
    TransactionType,
)
from ledger_kernel.domain.snapshot import Collection
from ledger_kernel.domain.values import to_decimal


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO 8601 date or datetime; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value)
    else:
        raise ValueError(f"Cannot parse timestamp from {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _encode_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass(frozen=True)
class _Field:
    attr: str
    key: str
    decode: Callable[[Any], Any]
    required: bool = True


def _decimal(value: Any) -> Decimal:
    return to_decimal(value, "stored amount")


def _text(value: Any) -> str:
    return str(value)


_LAYOUTS: dict[Collection, tuple[type, tuple[_Field, ...]]] = {
    Collection.FUNDS: (Fund, (
        _Field("id", "id", _text),
        _Field("name", "name", _text),
        _Field("balance", "balance", _decimal),
    )),
    Collection.TRANSACTIONS: (Transaction, (
        _Field("id", "id", _text),
        _Field("type", "type", TransactionType),
        _Field("description", "description", _text),
        _Field("amount", "amount", _decimal),
        _Field("category", "category", _text),
        _Field("date", "date", parse_timestamp),
        _Field("fund_id", "fundId", _text),
    )),
    Collection.CLIENTS: (Client, (
        _Field("id", "id", _text),
        _Field("name", "name", _text),
        _Field("ad_balance_usd", "adBalanceUSD", _decimal, required=False),
        _Field("avg_deposit_rate", "avgDepositRate", _decimal, required=False),
    )),
    Collection.AD_ACCOUNTS: (AdAccount, (
        _Field("id", "id", _text),
        _Field("name", "name", _text),
        _Field("platform_id", "platformId", _text),
        _Field("balance_usd", "balanceUSD", _decimal),
        _Field("avg_cost_per_usd", "avgCostPerUSD", _decimal, required=False),
    )),
    Collection.AD_TRANSACTIONS: (ClientAdTransaction, (
        _Field("id", "id", _text),
        _Field("client_id", "clientId", _text),
        _Field("type", "type", AdTransactionType),
        _Field("amount_usd", "amountUSD", _decimal),
        _Field("transaction_date", "transactionDate", parse_timestamp),
        _Field("amount_bdt", "amountBDT", _decimal, required=False),
        _Field("rate_per_usd", "ratePerUSD", _decimal, required=False),
        _Field("campaign_id", "campaignId", _text, required=False),
    )),
    Collection.CAMPAIGNS: (Campaign, (
        _Field("id", "id", _text),
        _Field("name", "name", _text),
        _Field("client_id", "clientId", _text),
        _Field("platform_id", "platformId", _text),
        _Field("status", "status", CampaignStatus),
        _Field("budget_usd", "budgetUSD", _decimal),
        _Field("created_at", "createdAt", parse_timestamp),
        _Field("requested_by", "requestedBy", _text, required=False),
        _Field("notes", "notes", _text, required=False),
        _Field("actual_spend_usd", "actualSpendUSD", _decimal, required=False),
        _Field("ad_account_id", "adAccountId", _text, required=False),
        _Field("profit", "profit", _decimal, required=False),
        _Field("completed_at", "completedAt", parse_timestamp, required=False),
        _Field("cancelled_at", "cancelledAt", parse_timestamp, required=False),
    )),
}


def decode_record(collection: Collection, record: dict[str, Any]) -> Any:
    """
    Build one entity from a stored record.

    Raises:
        KeyError: a required key is missing.
        ValueError: a value cannot be parsed (includes InvalidAmountError
            and unknown enum values).
    """
    entity_type, layout = _LAYOUTS[collection]
    known = {f.key for f in layout}
    kwargs: dict[str, Any] = {}
    for f in layout:
        value = record.get(f.key)
        if value is None:
            if f.required:
                raise KeyError(f.key)
            continue
        kwargs[f.attr] = f.decode(value)
    kwargs["extra"] = {k: v for k, v in record.items() if k not in known}
    return entity_type(**kwargs)


def encode_record(collection: Collection, entity: Any) -> dict[str, Any]:
    """Render one entity as a JSON-ready record; None optionals are omitted."""
    _, layout = _LAYOUTS[collection]
    record: dict[str, Any] = dict(entity.extra)
    for f in layout:
        value = getattr(entity, f.attr)
        if value is None:
            record.pop(f.key, None)
            continue
        record[f.key] = _encode_value(value)
    return record
