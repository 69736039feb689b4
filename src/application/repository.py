from __future__ import annotations

import logging
import secrets
import time
from typing import Any, Callable, Iterator

from domain.schemas import Transaction
from infrastructure.persistence.ledger_store import LedgerStore

logger = logging.getLogger(__name__)


def generate_transaction_id() -> str:
    return f"{time.time_ns() // 1_000_000}-{secrets.token_hex(4)}"


class TransactionRepository:
    """
    Authoritative in-memory ledger.

    New transactions are prepended. Every mutation is written through to the
    store after the in-memory state has changed. Field values are not
    validated here; callers pass `TransactionForm` output.
    """

    def __init__(
        self,
        store: LedgerStore,
        transactions: list[Transaction] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._store = store
        self._transactions: list[Transaction] = list(transactions or [])
        self._id_factory = id_factory or generate_transaction_id
        self._issued_ids: set[str] = {txn.id for txn in self._transactions}

    @classmethod
    def from_store(cls, store: LedgerStore, id_factory: Callable[[], str] | None = None) -> "TransactionRepository":
        return cls(store, store.load(), id_factory=id_factory)

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(list(self._transactions))

    def list(self) -> list[Transaction]:
        return list(self._transactions)

    def get(self, transaction_id: str) -> Transaction | None:
        for txn in self._transactions:
            if txn.id == transaction_id:
                return txn
        return None

    def add(self, fields: dict[str, Any]) -> Transaction:
        transaction = Transaction(**{**fields, "id": self._next_id()})
        self._transactions.insert(0, transaction)
        logger.info(
            "Repository add id=%s type=%s category=%s amount=%.2f",
            transaction.id,
            transaction.type.value,
            transaction.category.value,
            transaction.amount,
        )
        self._persist()
        return transaction

    def update(self, transaction: Transaction) -> None:
        for idx, existing in enumerate(self._transactions):
            if existing.id == transaction.id:
                self._transactions[idx] = transaction
                logger.info("Repository update id=%s", transaction.id)
                self._persist()
                return
        logger.warning("Repository update ignored; no transaction with id=%s", transaction.id)

    def delete(self, transaction_id: str) -> None:
        remaining = [txn for txn in self._transactions if txn.id != transaction_id]
        if len(remaining) == len(self._transactions):
            logger.warning("Repository delete ignored; no transaction with id=%s", transaction_id)
            return
        self._transactions = remaining
        logger.info("Repository delete id=%s remaining=%d", transaction_id, len(remaining))
        self._persist()

    def _next_id(self) -> str:
        candidate = self._id_factory()
        while candidate in self._issued_ids:
            candidate = self._id_factory()
        self._issued_ids.add(candidate)
        return candidate

    def _persist(self) -> None:
        self._store.save(self._transactions)
