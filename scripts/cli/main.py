"""
agency-ledger command line: one sub-command per ledger operation.

Every command prints JSON on stdout.  Exit codes:
    0  success
    1  configuration or database could not be set up
    2  the ledger rejected the operation (error code printed on stderr)

Usage:
    agency-ledger init-db
    agency-ledger transfer --from 1 --to 2 --amount 300
    agency-ledger report pnl --range 30d --csv
"""

import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError

from scripts.cli import config as cli_config
from scripts.cli.util import parse_when, print_json, setup_logging

REPORTS = (
    "summary",
    "pnl",
    "income",
    "expense",
    "monthly",
    "comparison",
    "recent",
    "funds",
    "ad-dashboard",
    "campaigns",
    "clients",
)


def _build_parser() -> argparse.ArgumentParser:
    from ledger_modules.ads.models import KNOWN_PLATFORMS
    from ledger_modules.finance.models import EXPENSE_CATEGORIES, INCOME_CATEGORIES
    from ledger_modules.reporting.models import DateRange

    parser = argparse.ArgumentParser(
        prog="agency-ledger",
        description="Funds, ad balances and campaign profit for the agency dashboard.",
    )
    parser.add_argument("--database-url", help="SQLAlchemy URL (default: $LEDGER_DATABASE_URL or local SQLite)")
    parser.add_argument("--config", help="Ledger config YAML (default: $LEDGER_CONFIG_PATH or packaged default)")
    parser.add_argument("--actor", help="Actor id recorded in the logs")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log INFO events to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the collection table")

    p = sub.add_parser("add-transaction", help="Record an income or expense")
    p.add_argument("--type", required=True, choices=["income", "expense"])
    p.add_argument("--description", required=True)
    p.add_argument("--amount", required=True)
    p.add_argument(
        "--category",
        default="Other",
        help=f"Income: {', '.join(INCOME_CATEGORIES)}. Expense: {', '.join(EXPENSE_CATEGORIES)}.",
    )
    p.add_argument("--fund", required=True, dest="fund_id")
    p.add_argument("--date", type=parse_when)
    p.add_argument("--id", dest="transaction_id")

    p = sub.add_parser("edit-transaction", help="Change a transaction (delete + re-create)")
    p.add_argument("transaction_id")
    p.add_argument("--type", choices=["income", "expense"])
    p.add_argument("--description")
    p.add_argument("--amount")
    p.add_argument("--category")
    p.add_argument("--fund", dest="fund_id")
    p.add_argument("--date", type=parse_when)

    p = sub.add_parser("delete-transactions", help="Delete transactions and restore fund balances")
    p.add_argument("transaction_ids", nargs="+")

    p = sub.add_parser("transfer", help="Move money between funds")
    p.add_argument("--from", required=True, dest="from_fund_id")
    p.add_argument("--to", required=True, dest="to_fund_id")
    p.add_argument("--amount", required=True)

    p = sub.add_parser("deposit", help="Credit a client's ad balance from a BDT payment")
    p.add_argument("--client", required=True, dest="client_id")
    p.add_argument("--bdt", required=True, dest="amount_bdt")
    p.add_argument("--rate", help="BDT per USD (default: the client's current rate, else 150)")

    p = sub.add_parser("recharge", help="Add prepaid USD to an ad account")
    p.add_argument("--account", required=True, dest="account_id")
    p.add_argument("--usd", required=True, dest="amount_usd")
    p.add_argument("--cost-bdt", required=True, dest="cost_bdt")

    p = sub.add_parser("submit-campaign", help="Create an ad request in pending")
    p.add_argument("--name", required=True)
    p.add_argument("--client", required=True, dest="client_id")
    p.add_argument("--platform", required=True, dest="platform_id", help=f"e.g. {', '.join(KNOWN_PLATFORMS)}")
    p.add_argument("--budget", required=True, dest="budget_usd")
    p.add_argument("--requested-by")
    p.add_argument("--notes")
    p.add_argument("--id", dest="campaign_id")

    p = sub.add_parser("start-campaign", help="Move a pending campaign to running")
    p.add_argument("campaign_id")

    p = sub.add_parser("update-campaign", help="Edit a pending or running campaign")
    p.add_argument("campaign_id")
    p.add_argument("--name")
    p.add_argument("--budget", dest="budget_usd")
    p.add_argument("--platform", dest="platform_id")
    p.add_argument("--notes")

    p = sub.add_parser("complete-campaign", help="Record spend, derive profit, settle balances")
    p.add_argument("campaign_id")
    p.add_argument("--spend", required=True, dest="spend_usd")
    p.add_argument("--account", required=True, dest="ad_account_id")

    p = sub.add_parser("cancel-campaign", help="Cancel a pending or running campaign")
    p.add_argument("campaign_id")

    p = sub.add_parser("report", help="Print a read-only report")
    p.add_argument("name", choices=REPORTS)
    p.add_argument("--range", dest="date_range", default="all", choices=[r.value for r in DateRange])
    p.add_argument("--days", type=int, default=30, help="Window for the comparison report")
    p.add_argument("--limit", type=int, default=5, help="Rows for the recent report")
    p.add_argument("--csv", action="store_true", help="Print CSV instead of JSON")

    return parser


def _run_report(services, args) -> None:
    from ledger_modules.reporting.export import export_rows_csv

    reporting = services.reporting
    name = args.name
    if name in ("pnl", "income", "expense"):
        result = reporting.finance_report(name, args.date_range)
    elif name == "summary":
        result = reporting.summary()
    elif name == "monthly":
        result = reporting.monthly_totals()
    elif name == "comparison":
        result = reporting.period_comparison(args.days)
    elif name == "recent":
        result = reporting.recent_transactions(args.limit)
    elif name == "funds":
        result = reporting.fund_overview()
    elif name == "ad-dashboard":
        result = reporting.ad_dashboard()
    elif name == "campaigns":
        rows, total = reporting.campaign_profit_report()
        result = rows if args.csv else {"rows": rows, "total_profit": total}
    else:
        result = reporting.client_balance_overview()

    if args.csv:
        if not isinstance(result, tuple):
            raise SystemExit(f"report {name} has no tabular form; drop --csv")
        sys.stdout.write(export_rows_csv(result))
    else:
        print_json(result)


def _dispatch(services, args) -> None:
    finance = services.finance
    ads = services.ads
    actor = args.actor
    command = args.command

    if command == "add-transaction":
        print_json(
            finance.apply_transaction(
                type=args.type,
                description=args.description,
                amount=args.amount,
                category=args.category,
                fund_id=args.fund_id,
                date=args.date,
                transaction_id=args.transaction_id,
                actor_id=actor,
            )
        )
    elif command == "edit-transaction":
        print_json(
            finance.edit_transaction(
                args.transaction_id,
                type=args.type,
                description=args.description,
                amount=args.amount,
                category=args.category,
                fund_id=args.fund_id,
                date=args.date,
                actor_id=actor,
            )
        )
    elif command == "delete-transactions":
        print_json(finance.delete_transactions(args.transaction_ids, actor_id=actor))
    elif command == "transfer":
        print_json(
            finance.transfer_funds(args.from_fund_id, args.to_fund_id, args.amount, actor_id=actor)
        )
    elif command == "deposit":
        rate = args.rate or ads.suggested_deposit_rate(args.client_id)
        print_json(ads.add_deposit(args.client_id, args.amount_bdt, rate, actor_id=actor))
    elif command == "recharge":
        print_json(
            ads.recharge_ad_account(args.account_id, args.amount_usd, args.cost_bdt, actor_id=actor)
        )
    elif command == "submit-campaign":
        print_json(
            ads.submit_campaign(
                name=args.name,
                client_id=args.client_id,
                platform_id=args.platform_id,
                budget_usd=args.budget_usd,
                requested_by=args.requested_by,
                notes=args.notes,
                campaign_id=args.campaign_id,
                actor_id=actor,
            )
        )
    elif command == "start-campaign":
        print_json(ads.start_campaign(args.campaign_id, actor_id=actor))
    elif command == "update-campaign":
        print_json(
            ads.update_campaign(
                args.campaign_id,
                name=args.name,
                budget_usd=args.budget_usd,
                platform_id=args.platform_id,
                notes=args.notes,
                actor_id=actor,
            )
        )
    elif command == "complete-campaign":
        print_json(
            ads.complete_campaign(args.campaign_id, args.spend_usd, args.ad_account_id, actor_id=actor)
        )
    elif command == "cancel-campaign":
        print_json(ads.cancel_campaign(args.campaign_id, actor_id=actor))
    elif command == "report":
        _run_report(services, args)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(args.verbose)

    from ledger_config import get_active_config
    from ledger_kernel.db.engine import create_tables, init_engine_from_url
    from ledger_kernel.exceptions import ConfigurationError, LedgerError
    from ledger_modules.runtime import build_services

    try:
        config = get_active_config(args.config)
        init_engine_from_url(cli_config.database_url(args.database_url))
        create_tables()
    except (ConfigurationError, SQLAlchemyError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if args.command == "init-db":
        print_json({"status": "ok", "config_id": config.config_id})
        return 0

    services = build_services(config)
    try:
        _dispatch(services, args)
    except LedgerError as exc:
        print(f"{exc.code}: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
