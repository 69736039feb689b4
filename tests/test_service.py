from __future__ import annotations

import unittest
from datetime import date

from application.repository import TransactionRepository
from application.service import LedgerService
from domain.models import Category, TransactionType
from domain.schemas import TransactionForm, ViewQuery
from infrastructure.persistence.backends import MemoryBackend
from infrastructure.persistence.ledger_store import LedgerStore
from llm.advisor import InsightAdvisor


class _StubLLMClient:
    def __init__(self, response: str = "Nice work."):
        self._response = response

    def complete(self, prompt: str) -> str:
        return self._response


class LedgerServiceTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.store = LedgerStore(MemoryBackend(), key="svc")
        self.service = LedgerService(TransactionRepository(self.store), InsightAdvisor(_StubLLMClient()))

    def _add(self, description: str, amount: float, day: str, category: str = "Food", txn_type: str = "debit"):
        return self.service.add(
            TransactionForm(date=day, category=category, description=description, amount=amount, type=txn_type)
        )

    def test_state_survives_reload(self) -> None:
        salary = self._add("Salary", 1000, "2024-01-01", "Income", "credit")
        self._add("Cinema", 18, "2024-01-04", "Entertainment")

        reloaded = TransactionRepository.from_store(self.store)
        self.assertEqual([t.description for t in reloaded.list()], ["Cinema", "Salary"])
        self.assertEqual(reloaded.get(salary.id).type, TransactionType.CREDIT)

    def test_update_keeps_id(self) -> None:
        txn = self._add("Pharmacy", 9, "2024-01-02", "Health")
        self.service.update(txn.id, TransactionForm(date="2024-01-03", category="Health", description="Doctor", amount=60))

        updated = self.service.repository.get(txn.id)
        self.assertEqual((updated.description, updated.amount, updated.date), ("Doctor", 60, "2024-01-03"))

    def test_views_follow_repository_state(self) -> None:
        self._add("Rent", 700, "2024-02-01", "Bills")
        self._add("Dinner", 50, "2024-02-02", "Food")
        self._add("Refund", 20, "2024-02-03", "Other", "credit")

        self.assertEqual(self.service.stats().balance, 20 - 750)
        self.assertEqual([t.description for t in self.service.view()], ["Refund", "Dinner", "Rent"])
        summary = self.service.category_summary(ViewQuery(categories=[Category.FOOD]))
        self.assertEqual([(s.category, s.percent) for s in summary], [(Category.FOOD, 100.0)])
        self.assertEqual(self.service.daily_series(today=date(2024, 2, 3))[-1].credit, 20)
        self.assertEqual([s.name for s in self.service.cash_flow()], ["Income", "Expenses"])

    def test_export_uses_collection_order_unless_sorted(self) -> None:
        self._add("Older", 1, "2024-01-01")
        self._add("Newer", 2, "2024-01-02")
        self._add("Middle", 3, "2024-01-01")

        rows = self.service.export_csv().splitlines()[1:]
        self.assertEqual([row.split(",")[3] for row in rows], ["Middle", "Newer", "Older"])

        rows = self.service.export_csv(ViewQuery(sort_key="amount", sort_direction="asc")).splitlines()[1:]
        self.assertEqual([row.split(",")[3] for row in rows], ["Older", "Newer", "Middle"])

    async def test_advice_uses_current_ledger(self) -> None:
        for i in range(3):
            self._add(f"Snack {i}", 2 + i, "2024-01-0%d" % (i + 1))
        self.assertEqual(await self.service.advice(), "Nice work.")


if __name__ == "__main__":
    unittest.main()
