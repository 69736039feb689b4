from __future__ import annotations

import logging
import time
from datetime import date

from application import exporter, views
from application.repository import TransactionRepository
from domain.models import CashFlowSlice, CategorySummary, DailyBucket, Totals
from domain.schemas import Transaction, TransactionForm, ViewQuery
from llm.advisor import InsightAdvisor

logger = logging.getLogger(__name__)


class LedgerService:
    """The operations a presentation layer calls: mutations, derived views, export and advice."""

    def __init__(self, repository: TransactionRepository, advisor: InsightAdvisor):
        self._repository = repository
        self._advisor = advisor

    @property
    def repository(self) -> TransactionRepository:
        return self._repository

    @property
    def advisor(self) -> InsightAdvisor:
        return self._advisor

    # ---- mutations ----
    def add(self, form: TransactionForm) -> Transaction:
        return self._repository.add(form.to_fields())

    def update(self, transaction_id: str, form: TransactionForm) -> None:
        self._repository.update(Transaction(id=transaction_id, **form.to_fields()))

    def delete(self, transaction_id: str) -> None:
        self._repository.delete(transaction_id)

    # ---- derived views ----
    def view(self, query: ViewQuery | None = None) -> list[Transaction]:
        return views.apply_view(self._repository.list(), query or ViewQuery())

    def stats(self) -> Totals:
        return views.compute_totals(self._repository.list())

    def category_summary(self, query: ViewQuery | None = None) -> list[CategorySummary]:
        filtered = views.filter_for_query(self._repository.list(), query or ViewQuery())
        return views.category_summary(filtered)

    def daily_series(self, today: date | None = None) -> list[DailyBucket]:
        return views.daily_series(self._repository.list(), today=today)

    def cash_flow(self) -> list[CashFlowSlice]:
        return views.cash_flow(self._repository.list())

    # ---- snapshots ----
    def export_csv(self, query: ViewQuery | None = None) -> str:
        transactions = self._repository.list()
        if query is not None:
            transactions = views.sort_transactions(transactions, query.sort_key, query.sort_direction)
        return exporter.to_csv(transactions)

    async def advice(self) -> str:
        t = time.perf_counter()
        text = await self._advisor.get_advice(self._repository.list())
        logger.info("Advice ready in %.2fs", time.perf_counter() - t)
        return text
