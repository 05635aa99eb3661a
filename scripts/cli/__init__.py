"""
Agency ledger CLI -- command-line front end for the ledger services.

Every ledger operation and report is one sub-command.

Entry point: the ``agency-ledger`` console script or python -m scripts.cli
"""

from scripts.cli.main import main

__all__ = ["main"]
