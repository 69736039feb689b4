"""
Pure views over a transaction collection.

Nothing here holds state or touches storage; every function can be called
repeatedly with the current ledger snapshot and returns fresh values.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Iterable, Sequence

from domain.models import CashFlowSlice, Category, CategorySummary, DailyBucket, SortDirection, Totals, TransactionType
from domain.schemas import SortKey, Transaction, ViewQuery

DAILY_WINDOW_DAYS = 7


def compute_totals(transactions: Iterable[Transaction]) -> Totals:
    income = 0.0
    expenses = 0.0
    for txn in transactions:
        if txn.type == TransactionType.CREDIT:
            income += txn.amount
        else:
            expenses += txn.amount
    return Totals(income=income, expenses=expenses, balance=income - expenses)


def filter_transactions(
    transactions: Iterable[Transaction],
    categories: Iterable[Category] = (),
    start: str | None = None,
    end: str | None = None,
) -> list[Transaction]:
    # ISO dates are fixed width, so string comparison orders them correctly.
    selected = set(categories)
    rows: list[Transaction] = []
    for txn in transactions:
        if selected and txn.category not in selected:
            continue
        if start and txn.date < start:
            continue
        if end and txn.date > end:
            continue
        rows.append(txn)
    return rows


def _sort_value(txn: Transaction, key: SortKey) -> Any:
    value = getattr(txn, key)
    if key == "amount":
        return float(value)
    return value.value if hasattr(value, "value") else str(value)


def sort_transactions(
    transactions: Iterable[Transaction],
    key: SortKey = "date",
    direction: SortDirection | str = SortDirection.DESC,
) -> list[Transaction]:
    """Stable sort: ties keep their input order in both directions."""
    descending = SortDirection(direction) == SortDirection.DESC
    return sorted(transactions, key=lambda txn: _sort_value(txn, key), reverse=descending)


def toggle_sort(current: ViewQuery, key: SortKey) -> ViewQuery:
    direction = SortDirection.ASC
    if current.sort_key == key and current.sort_direction == SortDirection.ASC:
        direction = SortDirection.DESC
    return current.model_copy(update={"sort_key": key, "sort_direction": direction})


def filter_for_query(transactions: Iterable[Transaction], query: ViewQuery) -> list[Transaction]:
    return filter_transactions(transactions, query.categories, query.start, query.end)


def apply_view(transactions: Iterable[Transaction], query: ViewQuery) -> list[Transaction]:
    return sort_transactions(filter_for_query(transactions, query), query.sort_key, query.sort_direction)


def category_summary(transactions: Iterable[Transaction]) -> list[CategorySummary]:
    """
    Debit totals per category for an already-filtered collection.

    Groups are ordered by descending total; equal totals keep the order in
    which their category first appeared.
    """
    totals: dict[Category, float] = {}
    for txn in transactions:
        if txn.type != TransactionType.DEBIT:
            continue
        totals[txn.category] = totals.get(txn.category, 0.0) + txn.amount

    debit_total = sum(totals.values())
    summaries = [
        CategorySummary(
            category=category,
            total=total,
            percent=(total / debit_total) * 100 if debit_total > 0 else 0.0,
        )
        for category, total in totals.items()
    ]
    return sorted(summaries, key=lambda s: s.total, reverse=True)


def daily_series(
    transactions: Iterable[Transaction],
    today: date | None = None,
    days: int = DAILY_WINDOW_DAYS,
) -> list[DailyBucket]:
    end = today or date.today()
    window = [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    credit: dict[str, float] = {day.isoformat(): 0.0 for day in window}
    debit: dict[str, float] = dict(credit)

    for txn in transactions:
        if txn.date not in credit:
            continue
        if txn.type == TransactionType.CREDIT:
            credit[txn.date] += txn.amount
        else:
            debit[txn.date] += txn.amount

    return [
        DailyBucket(
            day=day.isoformat(),
            label=day.strftime("%m/%d"),
            credit=credit[day.isoformat()],
            debit=debit[day.isoformat()],
        )
        for day in window
    ]


def cash_flow(transactions: Sequence[Transaction]) -> list[CashFlowSlice]:
    totals = compute_totals(transactions)
    slices = [
        CashFlowSlice(name="Income", value=totals.income),
        CashFlowSlice(name="Expenses", value=totals.expenses),
    ]
    return [s for s in slices if s.value > 0]
