from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any, Sequence

from dotenv import load_dotenv
from pydantic import ValidationError

from application import exporter
from application.repository import TransactionRepository
from application.service import LedgerService
from domain.models import Category, SortDirection, TransactionType
from domain.schemas import TransactionForm, ViewQuery
from infrastructure.llm.llm_client import LLMClient
from infrastructure.persistence.backends import FileBackend
from infrastructure.persistence.ledger_store import LedgerStore
from llm.advisor import InsightAdvisor

SORT_KEYS = ("date", "category", "description", "amount", "type")


def bootstrap() -> None:
    load_dotenv()
    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_service(data_dir: str | Path | None = None) -> LedgerService:
    store = LedgerStore(FileBackend(data_dir))
    return LedgerService(
        repository=TransactionRepository.from_store(store),
        advisor=InsightAdvisor(LLMClient()),
    )


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _form_from_args(args: argparse.Namespace) -> TransactionForm:
    return TransactionForm(
        date=args.date or date.today().isoformat(),
        category=args.category,
        description=args.description,
        amount=args.amount,
        type=args.type,
    )


def _query_from_args(args: argparse.Namespace) -> ViewQuery:
    return ViewQuery(
        categories=args.category or [],
        start=args.start,
        end=args.end,
        sort_key=getattr(args, "sort", "date"),
        sort_direction=getattr(args, "direction", SortDirection.DESC.value),
    )


def _add_form_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("description")
    parser.add_argument("amount", type=float)
    parser.add_argument("--date", help="YYYY-MM-DD, defaults to today")
    parser.add_argument("--category", default=Category.OTHER.value, choices=[c.value for c in Category])
    parser.add_argument("--type", default=TransactionType.DEBIT.value, choices=[t.value for t in TransactionType])


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--category", action="append", choices=[c.value for c in Category])
    parser.add_argument("--start", help="inclusive start date, YYYY-MM-DD")
    parser.add_argument("--end", help="inclusive end date, YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spendwise", description="Track credits and debits in a local ledger.")
    parser.add_argument("--data-dir", help="ledger directory (defaults to $SPENDWISE_DATA_DIR or ~/.spendwise)")
    sub = parser.add_subparsers(dest="command", required=True)

    _add_form_arguments(sub.add_parser("add", help="record a transaction"))

    edit = sub.add_parser("edit", help="replace every field of a transaction")
    edit.add_argument("id")
    _add_form_arguments(edit)

    delete = sub.add_parser("delete", help="remove a transaction")
    delete.add_argument("id")

    listing = sub.add_parser("list", help="filtered and sorted transactions")
    _add_filter_arguments(listing)
    listing.add_argument("--sort", default="date", choices=SORT_KEYS)
    listing.add_argument("--direction", default=SortDirection.DESC.value, choices=[d.value for d in SortDirection])

    sub.add_parser("stats", help="income, expenses and balance")

    summary = sub.add_parser("summary", help="debit totals per category")
    _add_filter_arguments(summary)

    sub.add_parser("daily", help="credit/debit totals for the last 7 days")

    export = sub.add_parser("export", help="write the ledger as CSV")
    export.add_argument("--output", help="file path; defaults to spendwise_export_<date>.csv in the current directory")

    sub.add_parser("advise", help="ask the model for a spending tip")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    service = build_service(args.data_dir)

    try:
        if args.command == "add":
            txn = service.add(_form_from_args(args))
            _print_json(txn.to_record())
        elif args.command == "edit":
            service.update(args.id, _form_from_args(args))
        elif args.command == "delete":
            service.delete(args.id)
        elif args.command == "list":
            _print_json([txn.to_record() for txn in service.view(_query_from_args(args))])
        elif args.command == "stats":
            _print_json(asdict(service.stats()))
        elif args.command == "summary":
            _print_json([asdict(item) for item in service.category_summary(_query_from_args(args))])
        elif args.command == "daily":
            _print_json([asdict(bucket) for bucket in service.daily_series()])
        elif args.command == "export":
            content = service.export_csv()
            if not content:
                print("Nothing to export.", file=sys.stderr)
                return 1
            path = Path(args.output or exporter.export_filename())
            path.write_text(content, encoding="utf-8")
            print(str(path))
        elif args.command == "advise":
            print(asyncio.run(service.advice()))
    except ValidationError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2
    return 0


def run() -> int:
    bootstrap()
    return main()


if __name__ == "__main__":
    raise SystemExit(run())
