from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class Category(str, Enum):
    INCOME = "Income"
    FOOD = "Food"
    TRAVEL = "Travel"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health"
    BILLS = "Bills"
    OTHER = "Other"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Totals:
    income: float
    expenses: float
    balance: float


@dataclass(frozen=True)
class CategorySummary:
    category: Category
    total: float
    percent: float


@dataclass(frozen=True)
class DailyBucket:
    day: str
    label: str
    credit: float = 0.0
    debit: float = 0.0


@dataclass(frozen=True)
class CashFlowSlice:
    name: str
    value: float
