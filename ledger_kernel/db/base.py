"""
Module: ledger_kernel.db.base
Responsibility: Declarative base class for the ledger's SQLAlchemy models.
    Provides the type annotation map so every column of a given Python type
    is declared the same way.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel's persistence code.  MUST NOT import from services/,
    domain/, or outer layers.

Invariants enforced:
    - datetime maps to DateTime(timezone=True) -- timestamps are always
      timezone-aware.
    - Decimal maps to Numeric(38, 9); amounts inside collection payloads are
      stored as decimal strings by the codec, never as floats.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import DateTime, Numeric
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all ledger models.

    Guarantees:
        - Decimal maps to Numeric(38, 9).
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
    }
