from __future__ import annotations

import csv
import io
from datetime import date
from decimal import Decimal
from typing import Sequence

from domain.schemas import Transaction

EXPORT_HEADERS = ["Date", "Type", "Category", "Description", "Amount"]
EXPORT_MEDIA_TYPE = "text/csv"


def format_amount(amount: float) -> str:
    """Plain decimal: no currency symbol, no grouping, no exponent, no trailing zeros."""
    text = format(Decimal(repr(float(amount))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def to_csv(transactions: Sequence[Transaction]) -> str:
    """
    Serialize transactions in their given order.

    An empty collection yields an empty string rather than a header-only
    document; callers should skip the export entirely in that case.
    """
    if not transactions:
        return ""

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(EXPORT_HEADERS)
    for txn in transactions:
        writer.writerow(
            [
                txn.date,
                txn.type.value,
                txn.category.value,
                txn.description,
                format_amount(txn.amount),
            ]
        )
    return buffer.getvalue()


def export_filename(today: date | None = None) -> str:
    return f"spendwise_export_{(today or date.today()).isoformat()}.csv"
