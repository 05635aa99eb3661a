"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads the ledger YAML configuration set and its seed file and parses them
into a frozen ``LedgerConfig``.  Runtime callers go through
``ledger_config.get_active_config()``; this module is the parsing step
behind it.

Architecture position
---------------------
**Config layer**.  Depends on the kernel's policy value objects only; the
kernel never imports from here.

Invariants enforced
-------------------
* Every parse failure raises ``ConfigurationError`` naming the file.
* Unknown collection keys, balance kinds and averaging modes are errors,
  not silently ignored.
* Money settings are parsed as ``Decimal``.

Failure modes
-------------
* Missing YAML file  -> ``ConfigurationError``.
* Malformed YAML  -> ``ConfigurationError`` chained from ``yaml.YAMLError``.
* Missing or invalid values  -> ``ConfigurationError``.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import DEFAULT_COLLECTION_NAMES, LedgerConfig
from ledger_kernel.domain.policy import BalanceKind, BalancePolicy, RateAveraging
from ledger_kernel.domain.snapshot import Collection
from ledger_kernel.exceptions import ConfigurationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("config.loader")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        ConfigurationError: the file is missing, unreadable, not valid
            YAML, or its top level is not a mapping.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError("file not found", source=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML: {e}", source=str(path)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("top level must be a mapping", source=str(path))
    return data


def parse_collection_names(data: dict[str, Any], source: str) -> dict[Collection, str]:
    names = dict(DEFAULT_COLLECTION_NAMES)
    for key, value in (data or {}).items():
        try:
            collection = Collection(key)
        except ValueError as e:
            raise ConfigurationError(f"unknown collection {key!r}", source=source) from e
        if not isinstance(value, str) or not value:
            raise ConfigurationError(
                f"collection name for {key!r} must be a non-empty string", source=source
            )
        names[collection] = value
    if len(set(names.values())) != len(names):
        raise ConfigurationError("collection names must be distinct", source=source)
    return names


def parse_balance_policy(data: dict[str, Any], source: str) -> BalancePolicy:
    flags: dict[str, bool] = {}
    for key, value in (data or {}).items():
        try:
            kind = BalanceKind(key)
        except ValueError as e:
            raise ConfigurationError(f"unknown balance kind {key!r}", source=source) from e
        if not isinstance(value, bool):
            raise ConfigurationError(
                f"allow_negative.{key} must be true or false", source=source
            )
        flags[kind.value] = value
    return BalancePolicy(**flags)


def parse_rate_averaging(value: Any, source: str) -> RateAveraging:
    try:
        return RateAveraging(value)
    except ValueError as e:
        allowed = ", ".join(m.value for m in RateAveraging)
        raise ConfigurationError(
            f"rate_averaging must be one of {allowed}, got {value!r}", source=source
        ) from e


def parse_decimal(value: Any, key: str, source: str) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ConfigurationError(f"{key} must be a number, got {value!r}", source=source) from e
    if not result.is_finite() or result < 0:
        raise ConfigurationError(f"{key} must be a non-negative number", source=source)
    return result


def parse_places(value: Any, key: str, source: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(f"{key} must be a non-negative integer", source=source)
    return value


def load_seeds(path: Path) -> dict[Collection, list[dict[str, Any]]]:
    """
    Load seed records keyed by logical collection.

    Seed records use the stored field names, exactly as the collection
    store would read them.
    """
    source = str(path)
    data = load_yaml_file(path)
    seeds: dict[Collection, list[dict[str, Any]]] = {}
    for key, records in data.items():
        try:
            collection = Collection(key)
        except ValueError as e:
            raise ConfigurationError(f"unknown seed collection {key!r}", source=source) from e
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise ConfigurationError(
                f"seed collection {key!r} must be a list of mappings", source=source
            )
        seeds[collection] = [_normalize_seed(r) for r in records]
    return seeds


def _normalize_seed(record: dict[str, Any]) -> dict[str, Any]:
    # YAML floats must not reach the ledger as binary floats.
    out: dict[str, Any] = {}
    for key, value in record.items():
        if isinstance(value, float):
            out[key] = str(value)
        elif hasattr(value, "isoformat"):
            out[key] = value.isoformat()
        else:
            out[key] = value
    return out


def load_config(path: Path) -> LedgerConfig:
    """
    Parse a configuration set file into a ``LedgerConfig``.

    A relative ``seed_file`` is resolved against the configuration file's
    directory.
    """
    source = str(path)
    data = load_yaml_file(path)

    try:
        config_id = str(data["id"])
        version = str(data["version"])
    except KeyError as e:
        raise ConfigurationError(f"missing required key {e.args[0]!r}", source=source) from e

    balances = data.get("balances") or {}
    reporting = data.get("reporting") or {}
    rounding = data.get("rounding") or {}

    seed_file: Path | None = None
    seeds: dict[Collection, list[dict[str, Any]]] = {}
    if data.get("seed_file"):
        seed_file = Path(data["seed_file"])
        if not seed_file.is_absolute():
            seed_file = (path.parent / seed_file).resolve()
        seeds = load_seeds(seed_file)

    config = LedgerConfig(
        config_id=config_id,
        version=version,
        collection_names=parse_collection_names(data.get("collections") or {}, source),
        balance_policy=parse_balance_policy(balances.get("allow_negative") or {}, source),
        rate_averaging=parse_rate_averaging(
            balances.get("rate_averaging", RateAveraging.LAST_OBSERVED.value), source
        ),
        transfer_category=str(data.get("transfer_category", "Transfers")),
        low_balance_threshold_usd=parse_decimal(
            reporting.get("low_balance_threshold_usd", "1000"),
            "reporting.low_balance_threshold_usd",
            source,
        ),
        usd_decimal_places=parse_places(
            rounding.get("usd_decimal_places", 2), "rounding.usd_decimal_places", source
        ),
        rate_display_places=parse_places(
            rounding.get("rate_display_places", 2), "rounding.rate_display_places", source
        ),
        verify_invariants_on_commit=bool(data.get("verify_invariants_on_commit", True)),
        seed_file=seed_file,
        seeds=seeds,
    )

    logger.info(
        "ledger_config_loaded",
        extra={
            "config_id": config.config_id,
            "config_version": config.version,
            "rate_averaging": config.rate_averaging.value,
            "seeded_collections": sorted(c.value for c in seeds),
        },
    )
    return config
