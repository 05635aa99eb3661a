"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every rejected ledger operation is shown to a person deciding what to do
next ("the source fund is short", "that campaign is already completed").
Callers must be able to tell these apart without parsing message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        service.transfer_funds(...)
    except Exception as e:
        if "insufficient" in str(e):  # FRAGILE - message might change
            show_shortfall()

Example - RIGHT way (what this module enables):
    try:
        service.transfer_funds(...)
    except InsufficientBalanceError as e:
        show_shortfall(e.fund_id, e.available, e.requested)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from LedgerError:

    LedgerError (base)
    |
    +-- ValidationError
    |   +-- InvalidAmountError
    |   +-- SameFundError
    |   +-- DuplicateEntityError
    |
    +-- ReferenceError_
    |   +-- InvalidReferenceError
    |   |   +-- PlatformMismatchError
    |   +-- MissingReferenceError
    |
    +-- BalanceError
    |   +-- InsufficientBalanceError
    |
    +-- StateError
    |   +-- InvalidStateError
    |
    +-- IntegrityError_
    |   +-- LedgerInvariantError
    |   +-- CollectionDecodeError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                        | When Raised
-------------|-----------------------------|-----------------------------------------
Validation   | INVALID_AMOUNT              | Amount or rate is missing, zero or negative
             | SAME_FUND                   | Transfer source equals destination
             | DUPLICATE_ENTITY            | New record reuses an existing id
-------------|-----------------------------|-----------------------------------------
Reference    | INVALID_REFERENCE           | Fund or transaction id doesn't resolve
             | PLATFORM_MISMATCH           | Ad account belongs to another platform
             | MISSING_REFERENCE           | Client, ad account or campaign not found
-------------|-----------------------------|-----------------------------------------
Balance      | INSUFFICIENT_BALANCE        | Balance would drop below zero (policy)
-------------|-----------------------------|-----------------------------------------
State        | INVALID_STATE               | Campaign status does not allow the action
-------------|-----------------------------|-----------------------------------------
Integrity    | LEDGER_INVARIANT_VIOLATION  | Staged snapshot breaks a structural invariant
             | COLLECTION_DECODE_ERROR     | Stored collection cannot be decoded
-------------|-----------------------------|-----------------------------------------
Config       | CONFIGURATION_ERROR         | Ledger configuration is invalid

===============================================================================
DESIGN DECISIONS
===============================================================================

1. WHY INHERIT FROM Exception (not ValueError, etc.)?
   Ledger rejections must be catchable as a group without also catching
   programming errors raised by the standard library.

2. WHY code CLASS ATTRIBUTE (not instance)?
   Codes are static per exception type, so the CLI and any API layer can
   map them without instantiating anything.

3. WHY TRAILING UNDERSCORE ON ReferenceError_ / IntegrityError_?
   The plain names shadow a Python builtin and the SQLAlchemy exception
   respectively.

===============================================================================
"""

from decimal import Decimal


class LedgerError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_ERROR"


# Validation exceptions


class ValidationError(LedgerError):
    """Base exception for rejected operation input."""

    code: str = "VALIDATION_ERROR"


class InvalidAmountError(ValidationError):
    """Amount or rate is missing, zero, negative or not a number."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}: {value!r} (must be a positive decimal)")


class SameFundError(ValidationError):
    """Transfer source and destination are the same fund."""

    code: str = "SAME_FUND"

    def __init__(self, fund_id: str):
        self.fund_id = fund_id
        super().__init__(f"Cannot transfer fund {fund_id} to itself")


class DuplicateEntityError(ValidationError):
    """A new record reuses the id of an existing one."""

    code: str = "DUPLICATE_ENTITY"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} already exists: {entity_id}")


# Reference exceptions


class ReferenceError_(LedgerError):
    """Base exception for ids that do not resolve to a usable entity."""

    code: str = "REFERENCE_ERROR"


class InvalidReferenceError(ReferenceError_):
    """A fund or transaction id does not match any known entity."""

    code: str = "INVALID_REFERENCE"

    def __init__(self, entity_type: str, entity_id: str, reason: str = "not found"):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(f"Invalid {entity_type} reference {entity_id}: {reason}")


class PlatformMismatchError(InvalidReferenceError):
    """The selected ad account runs on a different platform than the campaign."""

    code: str = "PLATFORM_MISMATCH"

    def __init__(self, ad_account_id: str, account_platform: str, campaign_platform: str):
        self.ad_account_id = ad_account_id
        self.account_platform = account_platform
        self.campaign_platform = campaign_platform
        super().__init__(
            "ad_account",
            ad_account_id,
            f"platform {account_platform} does not match campaign platform {campaign_platform}",
        )


class MissingReferenceError(ReferenceError_):
    """A client, ad account or campaign id could not be found."""

    code: str = "MISSING_REFERENCE"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


# Balance exceptions


class BalanceError(LedgerError):
    """Base exception for balance policy violations."""

    code: str = "BALANCE_ERROR"


class InsufficientBalanceError(BalanceError):
    """The operation would take a balance below zero where policy forbids it."""

    code: str = "INSUFFICIENT_BALANCE"

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        available: Decimal,
        requested: Decimal,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient balance in {entity_type} {entity_id}: "
            f"available={available}, requested={requested}"
        )


# State exceptions


class StateError(LedgerError):
    """Base exception for lifecycle errors."""

    code: str = "STATE_ERROR"


class InvalidStateError(StateError):
    """The campaign status does not allow the requested action."""

    code: str = "INVALID_STATE"

    def __init__(self, campaign_id: str, status: str, action: str):
        self.campaign_id = campaign_id
        self.status = status
        self.action = action
        super().__init__(
            f"Cannot {action} campaign {campaign_id} in status {status}"
        )


# Integrity exceptions


class IntegrityError_(LedgerError):
    """Base exception for persisted-state integrity failures."""

    code: str = "INTEGRITY_ERROR"


class LedgerInvariantError(IntegrityError_):
    """
    A staged snapshot violates a structural ledger invariant.

    Raised by the unit of work before commit; nothing is written.
    """

    code: str = "LEDGER_INVARIANT_VIOLATION"

    def __init__(self, violations: list[str]):
        self.violations = violations
        super().__init__(
            f"Ledger invariant violated ({len(violations)}): " + "; ".join(violations)
        )


class CollectionDecodeError(IntegrityError_):
    """A stored collection payload could not be decoded into entities."""

    code: str = "COLLECTION_DECODE_ERROR"

    def __init__(self, collection: str, reason: str):
        self.collection = collection
        self.reason = reason
        super().__init__(f"Cannot decode collection {collection}: {reason}")


# Configuration exceptions


class ConfigurationError(LedgerError):
    """The ledger configuration is invalid."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, reason: str, source: str | None = None):
        self.reason = reason
        self.source = source
        location = f" ({source})" if source else ""
        super().__init__(f"Invalid ledger configuration{location}: {reason}")
