from __future__ import annotations

import json
import logging
import os
from typing import Iterable

from pydantic import ValidationError

from domain.schemas import Transaction
from infrastructure.persistence.backends import FileBackend, KeyValueBackend

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "spendwise_expenses_data"


class LedgerStoreError(RuntimeError):
    pass


class LedgerStore:
    """
    Persists the whole transaction collection as one JSON array under a fixed key.

    Neither operation raises: a failed save is logged and the in-memory state
    stays authoritative for the session, a failed load yields an empty ledger.
    Individual records that do not match the schema are skipped with a warning.
    """

    def __init__(self, backend: KeyValueBackend | None = None, key: str | None = None) -> None:
        self._backend = backend or FileBackend()
        self.key = key or os.getenv("SPENDWISE_STORAGE_KEY", DEFAULT_STORAGE_KEY)

    def save(self, transactions: Iterable[Transaction]) -> bool:
        records = [txn.to_record() for txn in transactions]
        try:
            self._backend.write(self.key, json.dumps(records))
        except Exception as exc:
            logger.warning("LedgerStore save failed key=%s records=%d: %s", self.key, len(records), exc)
            return False
        logger.debug("LedgerStore saved key=%s records=%d", self.key, len(records))
        return True

    def load(self) -> list[Transaction]:
        try:
            transactions = self._read()
        except LedgerStoreError as exc:
            logger.warning("LedgerStore load failed key=%s; starting empty: %s", self.key, exc)
            return []
        logger.info("LedgerStore loaded key=%s records=%d", self.key, len(transactions))
        return transactions

    def _read(self) -> list[Transaction]:
        try:
            raw = self._backend.read(self.key)
        except Exception as exc:
            raise LedgerStoreError(f"backend read failed: {exc}") from exc
        if raw is None:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise LedgerStoreError(f"stored ledger is not valid JSON: {exc}") from exc
        if not isinstance(records, list):
            raise LedgerStoreError(f"Expected a list of transaction records, got {type(records).__name__}")

        transactions: list[Transaction] = []
        dropped = 0
        for idx, record in enumerate(records):
            try:
                transactions.append(Transaction.model_validate(record))
            except ValidationError as exc:
                dropped += 1
                logger.debug("LedgerStore skipping record index=%d: %s", idx, exc)
        if dropped:
            logger.warning(
                "LedgerStore dropped %d of %d stored records that did not match the Transaction schema key=%s; "
                "the next save will not include them",
                dropped,
                len(records),
                self.key,
            )
        return transactions
