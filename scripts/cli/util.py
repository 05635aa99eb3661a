"""CLI utilities: JSON output, timestamp parsing, logging setup."""

import json
import logging
import sys
from datetime import datetime, timezone

from ledger_kernel.logging_config import configure_logging
from ledger_modules.reporting.export import render_to_dict


def print_json(obj, stream=None) -> None:
    """Print a report model, entity or plain value as indented JSON."""
    print(json.dumps(render_to_dict(obj), indent=2, ensure_ascii=False), file=stream or sys.stdout)


def parse_when(value: str) -> datetime:
    """argparse type for ISO 8601 timestamps; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def setup_logging(verbose: bool) -> None:
    """Structured logs on stderr: INFO with --verbose, WARNING otherwise."""
    configure_logging(level=logging.INFO if verbose else logging.WARNING, stream=sys.stderr)
