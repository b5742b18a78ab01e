from __future__ import annotations

import logging
from typing import Protocol, Sequence

import httpx

logger = logging.getLogger(__name__)


async def send_telegram_message(*, bot_token: str, chat_id: str, text: str, timeout_seconds: float = 20.0) -> None:
    url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
    payload = {
        "chat_id": chat_id,
        "text": text,
        "disable_web_page_preview": True,
    }

    async with httpx.AsyncClient(timeout=timeout_seconds) as client:
        r = await client.post(url, json=payload)
        r.raise_for_status()
        data = r.json()
        if not data.get("ok", False):
            raise RuntimeError(f"Telegram API error: {data}")


class FailureReporter(Protocol):
    async def report(self, source: str, error: BaseException) -> None: ...


class LoggingReporter:
    async def report(self, source: str, error: BaseException) -> None:
        # Stack traces are noise here: the failure is recovered from.
        logger.error("%s refresh failed (%s: %s)", source, type(error).__name__, error)


class TelegramReporter:
    """Broadcasts refresh failures to every configured chat, best-effort."""

    def __init__(self, *, bot_token: str, chat_ids: Sequence[str]) -> None:
        self.bot_token = bot_token
        self.chat_ids = tuple(chat_ids)

    async def report(self, source: str, error: BaseException) -> None:
        text = (
            "Dashboard: failed to refresh data.\n"
            f"Source: {source}\n"
            f"Reason: {type(error).__name__}: {error}"
        )
        for chat_id in self.chat_ids:
            try:
                await send_telegram_message(bot_token=self.bot_token, chat_id=chat_id, text=text)
            except Exception as e:
                # Don't stop sending to other chat_ids.
                logger.warning("Failed to send telegram message to chat_id=%s (%s: %s)", chat_id, type(e).__name__, e)


class CompositeReporter:
    def __init__(self, reporters: Sequence[FailureReporter]) -> None:
        self.reporters = tuple(reporters)

    async def report(self, source: str, error: BaseException) -> None:
        for reporter in self.reporters:
            try:
                await reporter.report(source, error)
            except Exception:
                logger.warning("Failure reporter %s raised", type(reporter).__name__, exc_info=True)
