from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from providerdash.notifier import CompositeReporter, LoggingReporter, TelegramReporter


@pytest.mark.asyncio
async def test_telegram_reporter_sends_to_every_chat() -> None:
    reporter = TelegramReporter(bot_token="TEST_TOKEN", chat_ids=("1", "2", "3"))

    with patch("providerdash.notifier.send_telegram_message", new_callable=AsyncMock) as send_msg:
        await reporter.report("day-appointments", RuntimeError("boom"))

    assert send_msg.await_count == 3
    assert [c.kwargs["chat_id"] for c in send_msg.await_args_list] == ["1", "2", "3"]
    assert "day-appointments" in send_msg.await_args_list[0].kwargs["text"]
    assert "RuntimeError: boom" in send_msg.await_args_list[0].kwargs["text"]


@pytest.mark.asyncio
async def test_telegram_reporter_keeps_going_when_one_chat_fails() -> None:
    reporter = TelegramReporter(bot_token="TEST_TOKEN", chat_ids=("1", "2"))

    with patch(
        "providerdash.notifier.send_telegram_message",
        new_callable=AsyncMock,
        side_effect=[RuntimeError("telegram down"), None],
    ) as send_msg:
        await reporter.report("month-availability", RuntimeError("boom"))  # should not raise

    assert send_msg.await_count == 2


@pytest.mark.asyncio
async def test_composite_reporter_isolates_failing_reporters(caplog: pytest.LogCaptureFixture) -> None:
    class _Broken:
        async def report(self, source: str, error: BaseException) -> None:
            raise RuntimeError("nope")

    reporter = CompositeReporter([_Broken(), LoggingReporter()])

    with caplog.at_level("ERROR"):
        await reporter.report("month-availability", RuntimeError("boom"))

    assert "month-availability refresh failed (RuntimeError: boom)" in caplog.text
