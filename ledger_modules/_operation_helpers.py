"""
Shared helpers for ledger module services.

Used by ledger_modules/*/service.py to reduce duplication when logging a
rejected operation and re-raising it.

Architecture: Modules layer. Imports only from ledger_kernel.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from ledger_kernel.exceptions import LedgerError


@contextmanager
def reject_logged(logger: logging.Logger, operation: str, **fields: object) -> Iterator[None]:
    """
    Log any LedgerError raised inside the block, then re-raise it.

    The log line carries the error code and its structured fields so a
    rejected operation can be traced without parsing messages.
    """
    try:
        yield
    except LedgerError as e:
        logger.warning(
            "ledger_operation_rejected",
            extra={
                "operation": operation,
                "error_code": e.code,
                "error_message": str(e),
                **{k: str(v) for k, v in fields.items() if v is not None},
            },
        )
        raise
