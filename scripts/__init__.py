"""Operational scripts for the agency ledger."""
