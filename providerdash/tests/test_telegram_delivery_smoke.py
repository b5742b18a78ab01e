"""Smoke/integration test for Telegram delivery.

This test talks to the real Telegram API and is skipped by default. To run
it, set TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID (for a comma-separated list
only the first id is used) and run:

    python -m pytest -q -m telegram
"""

from __future__ import annotations

import os

import pytest

from providerdash.notifier import send_telegram_message


pytestmark = pytest.mark.telegram


def _first_chat_id(raw: str) -> str:
    return raw.split(",", 1)[0].strip()


@pytest.mark.asyncio
@pytest.mark.skipif(
    not os.getenv("TELEGRAM_BOT_TOKEN") or not os.getenv("TELEGRAM_CHAT_ID"),
    reason="Set TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID to run Telegram smoke test",
)
async def test_telegram_message_delivery_smoke() -> None:
    await send_telegram_message(
        bot_token=os.environ["TELEGRAM_BOT_TOKEN"],
        chat_id=_first_chat_id(os.environ["TELEGRAM_CHAT_ID"]),
        text="providerdash: Telegram smoke test (pytest)",
    )
