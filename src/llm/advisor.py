from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Protocol, Sequence

from domain.schemas import Transaction

logger = logging.getLogger(__name__)

MIN_TRANSACTIONS = 3
SAMPLE_SIZE = 15

ENCOURAGEMENT_TEXT = "Keep adding expenses! Once you have at least 3, I can analyze your spending patterns."
EMPTY_RESPONSE_TEXT = "You're doing great! Keep tracking to stay on top of your budget."
FAILURE_TEXT = "I'm having trouble thinking right now. Check back later!"

PROMPT_TEMPLATE = (
    "Analyze this list of expenses (JSON format): {sample}.\n"
    "Give me a very short (max 2 sentences), encouraging financial tip based on these categories and amounts.\n"
    "Focus on saving or potential habits. Keep it professional yet friendly."
)


class TextCompleter(Protocol):
    def complete(self, prompt: str) -> str: ...


def recent_sample(transactions: Sequence[Transaction], size: int = SAMPLE_SIZE) -> list[Transaction]:
    """The `size` most recent transactions by date; same-day entries keep ledger order."""
    ordered = sorted(transactions, key=lambda txn: txn.date, reverse=True)
    return ordered[:size]


class InsightAdvisor:
    """
    Turns a ledger snapshot into one short tip from a text-generation model.

    A single attempt is made per request and every failure degrades to a
    fixed message. Calls made while a request is outstanding share its
    result instead of starting another one.
    """

    def __init__(self, llm_client: TextCompleter):
        self._llm = llm_client
        self._in_flight: asyncio.Task[str] | None = None

    @property
    def busy(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    def build_prompt(self, sample: Sequence[Transaction]) -> str:
        payload = json.dumps([txn.to_record() for txn in sample])
        return PROMPT_TEMPLATE.format(sample=payload)

    async def get_advice(self, transactions: Sequence[Transaction]) -> str:
        if len(transactions) < MIN_TRANSACTIONS:
            logger.info("InsightAdvisor skipped; only %d transactions", len(transactions))
            return ENCOURAGEMENT_TEXT

        if self.busy:
            logger.info("InsightAdvisor request already in flight; awaiting it")
            return await asyncio.shield(self._in_flight)

        prompt = self.build_prompt(recent_sample(transactions))
        self._in_flight = asyncio.ensure_future(self._request(prompt))
        try:
            return await asyncio.shield(self._in_flight)
        finally:
            if self._in_flight is not None and self._in_flight.done():
                self._in_flight = None

    async def _request(self, prompt: str) -> str:
        started = time.perf_counter()
        try:
            text = await asyncio.to_thread(self._llm.complete, prompt)
        except Exception:
            logger.exception("InsightAdvisor request failed after %.2fs", time.perf_counter() - started)
            return FAILURE_TEXT

        if not isinstance(text, str) or not text.strip():
            logger.info("InsightAdvisor empty model response; using fallback tip")
            return EMPTY_RESPONSE_TEXT
        logger.info("InsightAdvisor tip received in %.2fs chars=%d", time.perf_counter() - started, len(text))
        return text
