from __future__ import annotations

import asyncio
import json
import threading
import unittest

from domain.schemas import Transaction
from infrastructure.llm.llm_client import LLMClientError
from llm.advisor import (
    EMPTY_RESPONSE_TEXT,
    ENCOURAGEMENT_TEXT,
    FAILURE_TEXT,
    SAMPLE_SIZE,
    InsightAdvisor,
    recent_sample,
)


class _StubLLMClient:
    def __init__(self, response: str = "Cook at home twice a week.", error: Exception | None = None):
        self._response = response
        self._error = error
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self._error is not None:
            raise self._error
        return self._response


class _BlockingLLMClient(_StubLLMClient):
    def __init__(self) -> None:
        super().__init__("Shared tip.")
        self.release = threading.Event()

    def complete(self, prompt: str) -> str:
        self.release.wait(timeout=5)
        return super().complete(prompt)


def _ledger(count: int) -> list[Transaction]:
    return [
        Transaction(
            id=f"t{i}",
            date=f"2024-01-{i + 1:02d}",
            category="Food",
            description=f"Meal {i}",
            amount=10 + i,
            type="debit",
        )
        for i in range(count)
    ]


class InsightAdvisorTests(unittest.IsolatedAsyncioTestCase):
    async def test_small_sample_never_calls_model(self) -> None:
        client = _StubLLMClient()
        advisor = InsightAdvisor(client)

        for count in (0, 1, 2):
            self.assertEqual(await advisor.get_advice(_ledger(count)), ENCOURAGEMENT_TEXT)
        self.assertEqual(client.prompts, [])

    async def test_returns_model_text_verbatim(self) -> None:
        client = _StubLLMClient("Try a weekly grocery budget.")
        advice = await InsightAdvisor(client).get_advice(_ledger(3))

        self.assertEqual(advice, "Try a weekly grocery budget.")
        self.assertEqual(len(client.prompts), 1)

    async def test_prompt_embeds_at_most_fifteen_recent_transactions(self) -> None:
        client = _StubLLMClient()
        await InsightAdvisor(client).get_advice(_ledger(20))

        prompt = client.prompts[0]
        payload = json.loads(prompt[prompt.index("[") : prompt.rindex("]") + 1])
        self.assertEqual(len(payload), SAMPLE_SIZE)
        self.assertEqual(payload[0]["id"], "t19")
        self.assertNotIn("t0", {row["id"] for row in payload})
        self.assertIn("max 2 sentences", prompt)

    async def test_failures_degrade_to_fixed_message(self) -> None:
        for error in (LLMClientError("connection refused"), ValueError("bad payload"), TimeoutError()):
            advisor = InsightAdvisor(_StubLLMClient(error=error))
            with self.assertLogs("llm.advisor", level="ERROR"):
                self.assertEqual(await advisor.get_advice(_ledger(5)), FAILURE_TEXT)

    async def test_empty_response_uses_fallback_tip(self) -> None:
        self.assertEqual(await InsightAdvisor(_StubLLMClient("   ")).get_advice(_ledger(4)), EMPTY_RESPONSE_TEXT)

    async def test_concurrent_calls_share_one_request(self) -> None:
        client = _BlockingLLMClient()
        advisor = InsightAdvisor(client)

        first = asyncio.create_task(advisor.get_advice(_ledger(4)))
        await asyncio.sleep(0.05)
        self.assertTrue(advisor.busy)
        second = asyncio.create_task(advisor.get_advice(_ledger(6)))
        await asyncio.sleep(0.05)
        client.release.set()

        self.assertEqual(await asyncio.gather(first, second), ["Shared tip.", "Shared tip."])
        self.assertEqual(len(client.prompts), 1)
        self.assertFalse(advisor.busy)


class RecentSampleTests(unittest.TestCase):
    def test_orders_newest_first_and_keeps_ledger_order_for_ties(self) -> None:
        rows = _ledger(3) + [
            Transaction(id="same-a", date="2024-01-03", category="Bills", description="x", amount=1, type="debit"),
        ]
        self.assertEqual([t.id for t in recent_sample(rows, size=3)], ["t2", "same-a", "t1"])


if __name__ == "__main__":
    unittest.main()
