"""Command line access to a local Contudo ledger file."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

from contudo.config import settings
from contudo.schemas.common import Category, TransactionType, category_label
from contudo.schemas.transaction import Transaction, TransactionFilter
from contudo.services.backup_service import BackupService
from contudo.services.common import LedgerStore
from contudo.services.ledger_service import LedgerService
from contudo.services.recurrence_service import RecurrenceService
from contudo.utils.errors import AppError
from contudo.utils.storage import build_storage
from contudo.utils.time import Clock, FixedClock, SystemClock, parse_iso_date


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="contudo",
        description="Manage a Contudo ledger stored in a JSON data file.",
    )
    parser.add_argument(
        "--data-file",
        type=str,
        default=settings.data_file,
        help=f"Ledger data file (default: {settings.data_file}).",
    )
    parser.add_argument(
        "--today",
        type=str,
        default=None,
        help="Pretend the current date is this ISO date.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    list_parser = commands.add_parser("list", help="List transactions.")
    list_parser.add_argument("--search", type=str, default=None)
    list_parser.add_argument("--type", choices=[item.value for item in TransactionType])
    list_parser.add_argument("--category", choices=[item.value for item in Category])

    add_parser = commands.add_parser("add", help="Record a transaction.")
    add_parser.add_argument("description", type=str)
    add_parser.add_argument("amount", type=str, help="Positive amount.")
    add_parser.add_argument("type", choices=[item.value for item in TransactionType])
    add_parser.add_argument("--category", choices=[item.value for item in Category])
    add_parser.add_argument("--date", type=str, default=None)
    add_parser.add_argument("--due-date", type=str, default=None)
    add_parser.add_argument(
        "--fixed",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Mark as a fixed monthly expense (default: fixed when it has a due date).",
    )

    pay_parser = commands.add_parser("pay", help="Mark a transaction as paid.")
    pay_parser.add_argument("id", type=int)

    delete_parser = commands.add_parser("delete", help="Remove a transaction.")
    delete_parser.add_argument("id", type=int)

    totals_parser = commands.add_parser("totals", help="Show income, expense and balance.")
    totals_parser.add_argument("--year", type=int, default=None)
    totals_parser.add_argument("--month", type=int, default=None)

    commands.add_parser("overdue", help="List overdue expenses.")

    upcoming_parser = commands.add_parser("upcoming", help="List expenses due soon.")
    upcoming_parser.add_argument("--days", type=int, default=settings.upcoming_window_days)

    commands.add_parser("run-scheduled", help="Materialize due scheduled transactions.")

    export_parser = commands.add_parser("export", help="Write a JSON backup.")
    export_parser.add_argument("path", type=Path)

    import_parser = commands.add_parser("import", help="Replace data from a JSON backup.")
    import_parser.add_argument("path", type=Path)

    serve_parser = commands.add_parser("serve", help="Run the HTTP API.")
    serve_parser.add_argument("--host", type=str, default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=3000)

    return parser.parse_args(argv)


def format_currency(amount: Decimal) -> str:
    """Format an amount the Brazilian way, e.g. ``R$ -1.500,00``."""
    text = f"{amount:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {text}"


def print_transactions(rows: Sequence[Transaction]) -> None:
    """Print transactions one per line."""
    if not rows:
        print("Nenhuma transação encontrada")
        return
    for row in rows:
        flags = []
        if row.due_date:
            flags.append(f"vence {row.due_date.isoformat()}")
        if row.is_overdue:
            flags.append("VENCIDA")
        if row.is_paid:
            flags.append("paga")
        suffix = f" ({', '.join(flags)})" if flags else ""
        print(
            f"#{row.id} {row.date.isoformat()} {row.description} "
            f"[{category_label(row.category)}] {format_currency(row.amount)}{suffix}"
        )


def build_clock(today: str | None) -> Clock:
    """Return the wall clock, or a fixed one for ``--today``."""
    if today:
        day = parse_iso_date(today)
        return FixedClock(datetime(day.year, day.month, day.day, 12, tzinfo=UTC))
    return SystemClock(settings.timezone)


def run(args: argparse.Namespace) -> int:
    """Dispatch one parsed command."""
    clock = build_clock(args.today)

    if args.command == "serve":
        import uvicorn

        # The app builds its store from settings, so point it at this ledger first.
        settings.data_file = args.data_file
        from contudo.main import create_app

        uvicorn.run(create_app(clock=clock), host=args.host, port=args.port)
        return 0

    store = LedgerStore(build_storage(args.data_file))
    store.load()
    ledger = LedgerService(store, clock)
    ledger.refresh_overdue()

    if args.command == "list":
        filters = TransactionFilter(search=args.search, type=args.type, category=args.category)
        print_transactions(ledger.list_transactions(filters))
    elif args.command == "add":
        record = ledger.add(
            description=args.description,
            amount=args.amount,
            entry_type=args.type,
            category=args.category,
            entry_date=parse_iso_date(args.date) if args.date else None,
            due_date=parse_iso_date(args.due_date) if args.due_date else None,
            is_fixed=args.fixed,
        )
        print_transactions([record])
    elif args.command == "pay":
        print_transactions([ledger.mark_paid(args.id)])
    elif args.command == "delete":
        removed = ledger.delete(args.id)
        print(f"Transação removida: {removed.description}")
    elif args.command == "totals":
        totals = ledger.totals(year=args.year, month=args.month)
        print(f"Receitas: {format_currency(totals.income)}")
        print(f"Despesas: {format_currency(totals.expense)}")
        print(f"Saldo: {format_currency(totals.balance)}")
    elif args.command == "overdue":
        print_transactions(ledger.overdue())
    elif args.command == "upcoming":
        print_transactions(ledger.upcoming(args.days))
    elif args.command == "run-scheduled":
        created = RecurrenceService(store, clock).run_due()
        print(f"{len(created)} transação(ões) agendada(s) executada(s)")
        print_transactions(created)
    elif args.command == "export":
        document = BackupService(store, clock).export()
        args.path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
        print(f"Backup salvo em {args.path}")
    elif args.command == "import":
        document = json.loads(args.path.read_text(encoding="utf-8"))
        counts = BackupService(store, clock).import_data(document)
        print(f"{counts['transactions']} transação(ões) importada(s)")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    args = parse_args(argv)
    try:
        return run(args)
    except AppError as exc:
        print(f"Erro: {exc.message}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"Erro: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
