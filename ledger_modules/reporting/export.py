"""
Report rendering -- plain dicts for JSON and CSV text for export.

ZERO I/O: the CSV is returned as a string; writing it anywhere is the
caller's business.
"""

from __future__ import annotations

import csv
import dataclasses
import io
from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


def render_to_dict(obj: object) -> Any:
    """
    Convert any report dataclass or entity to plain data for JSON.

    Handles:
    - Decimal -> str (preserving precision)
    - datetime/date -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
            if f.name != "extra"
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)


def export_rows_csv(rows: Sequence[object]) -> str:
    """
    Render report rows as CSV text with a header row of field names.

    Rows may be dataclasses or mappings; the first row's keys define the
    columns.  An empty sequence renders as an empty string.
    """
    if not rows:
        return ""
    records = [render_to_dict(r) for r in rows]
    headers = list(records[0].keys())
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=headers, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for record in records:
        writer.writerow({k: "" if record.get(k) is None else record.get(k) for k in headers})
    return buffer.getvalue()
