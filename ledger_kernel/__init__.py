"""
Ledger Kernel - balance reconciliation core

Keeps named balances consistent as transactions occur against them:
- Cash funds (income, expense, transfers)
- Client ad-prepayment balances
- Ad-platform account balances
- Derived campaign profit from the deposit/cost rate spread
"""

__version__ = "0.1.0"
