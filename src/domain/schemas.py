from __future__ import annotations

import datetime as dt
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.models import Category, SortDirection, TransactionType

SortKey = Literal["date", "category", "description", "amount", "type"]

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%m-%d-%Y")


def coerce_iso_date(value: Any) -> Any:
    """Normalize a date-like value to `YYYY-MM-DD`; unknown shapes pass through for pydantic to reject."""
    if isinstance(value, dt.datetime):
        return value.date().isoformat()
    if isinstance(value, dt.date):
        return value.isoformat()
    if not isinstance(value, str):
        return value

    text = value.strip()
    if not text:
        return value

    # Canonical format first.
    for fmt in _DATE_FORMATS:
        try:
            return dt.datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return value


def _require_iso_date(value: str) -> str:
    try:
        return dt.date.fromisoformat(value).isoformat()
    except ValueError as exc:
        raise ValueError(f"date must be YYYY-MM-DD, got {value!r}") from exc


def _coerce_enum_text(value: Any, enum_cls: type) -> Any:
    if isinstance(value, enum_cls) or not isinstance(value, str):
        return value
    text = value.strip().lower()
    for member in enum_cls:
        if member.value.lower() == text:
            return member
    return value


class Transaction(BaseModel):
    """A persisted ledger entry. Field names and enum spellings are the storage format."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: str
    category: Category
    description: str
    amount: float
    type: TransactionType

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class TransactionForm(BaseModel):
    """
    Form-boundary input for creating or replacing a transaction.

    This is the only place amounts and descriptions are validated; the
    repository accepts whatever it is given.
    """

    date: str = Field(description="Transaction date, YYYY-MM-DD.")
    category: Category = Category.OTHER
    description: str
    amount: float = Field(gt=0, allow_inf_nan=False)
    type: TransactionType = TransactionType.DEBIT

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, value: Any) -> Any:
        return coerce_iso_date(value)

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        return _require_iso_date(value)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, value: Any) -> Any:
        return _coerce_enum_text(value, Category)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, value: Any) -> Any:
        return _coerce_enum_text(value, TransactionType)

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("description must not be empty")
        return text

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump()


class ViewQuery(BaseModel):
    """
    Parameters of a filtered and sorted transaction view.

    Filters (AND-composed):
      - categories: empty means all categories
      - start / end: inclusive ISO dates, either may be omitted
    Sort:
      - sort_key / sort_direction, defaulting to newest date first
    """

    categories: List[Category] = Field(default_factory=list)
    start: Optional[str] = None
    end: Optional[str] = None
    sort_key: SortKey = "date"
    sort_direction: SortDirection = SortDirection.DESC

    @field_validator("start", "end", mode="before")
    @classmethod
    def normalize_dates(cls, value: Any) -> Any:
        if value == "":
            return None
        return coerce_iso_date(value)

    @field_validator("categories", mode="before")
    @classmethod
    def coerce_categories(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple, set)):
            return [_coerce_enum_text(item, Category) for item in value]
        return value

    @field_validator("start", "end")
    @classmethod
    def validate_dates(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _require_iso_date(value)


class TotalsResponse(BaseModel):
    income: float
    expenses: float
    balance: float


class CategorySummaryResponse(BaseModel):
    category: Category
    total: float
    percent: float


class DailyBucketResponse(BaseModel):
    day: str
    label: str
    credit: float
    debit: float


class CashFlowSliceResponse(BaseModel):
    name: str
    value: float


class AdviceResponse(BaseModel):
    advice: str
