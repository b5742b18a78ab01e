from __future__ import annotations

import datetime as dt
import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


def _parse_telegram_chat_ids(raw: str) -> tuple[str, ...]:
    """Comma-separated chat ids, e.g. `123456789,-1001234567890`.

    Blank items and repeats are dropped; order of first appearance is kept.
    """
    chat_ids: dict[str, None] = {}
    for item in filter(None, (part.strip() for part in raw.split(","))):
        try:
            number = int(item)
        except ValueError as e:
            raise RuntimeError(f"Invalid TELEGRAM_CHAT_ID value: {item!r}. Expected integer chat id.") from e
        # Negative ids are group chats.
        if number == 0:
            raise RuntimeError(f"Invalid TELEGRAM_CHAT_ID value: {item!r} is not a valid chat id")
        chat_ids.setdefault(item)

    if not chat_ids:
        raise RuntimeError("TELEGRAM_CHAT_ID is empty. Provide at least one chat id.")
    return tuple(chat_ids)


def _parse_timezone(raw: str | None) -> dt.tzinfo:
    if not raw:
        # System local zone, same as the browser would use.
        local = dt.datetime.now().astimezone().tzinfo
        return local if local is not None else dt.timezone.utc
    try:
        return ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise RuntimeError(f"Invalid DISPLAY_TIMEZONE value: {raw!r}") from e


@dataclass(frozen=True)
class Settings:
    api_base_url: str
    user_id: str
    user_name: str

    api_token: str | None = None
    user_avatar_url: str = ""

    # Hours are bucketed and formatted in this zone.
    display_timezone: dt.tzinfo = dt.timezone.utc

    request_timeout_seconds: float = 20.0

    # How many times a single read is attempted on transport errors.
    fetch_retry_attempts: int = 1

    # Optional failure notifications
    telegram_bot_token: str | None = None
    telegram_chat_ids: tuple[str, ...] = ()

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_ids)


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def load_settings(dotenv_path: str | None = None) -> Settings:
    # Prefer .env in repo root; dotenv_path allows overriding in tests.
    load_dotenv(dotenv_path=dotenv_path, override=False)

    request_timeout_seconds = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "20"))
    if request_timeout_seconds <= 0:
        raise RuntimeError("REQUEST_TIMEOUT_SECONDS must be > 0")

    fetch_retry_attempts = int(os.getenv("FETCH_RETRY_ATTEMPTS", "1"))
    if fetch_retry_attempts < 1:
        raise RuntimeError("FETCH_RETRY_ATTEMPTS must be >= 1")

    telegram_bot_token = os.getenv("TELEGRAM_BOT_TOKEN") or None
    telegram_chat_ids: tuple[str, ...] = ()
    if telegram_bot_token:
        telegram_chat_ids = _parse_telegram_chat_ids(_require("TELEGRAM_CHAT_ID"))

    return Settings(
        api_base_url=_require("API_BASE_URL").rstrip("/"),
        user_id=_require("USER_ID"),
        user_name=_require("USER_NAME"),
        api_token=os.getenv("API_TOKEN") or None,
        user_avatar_url=os.getenv("USER_AVATAR_URL", ""),
        display_timezone=_parse_timezone(os.getenv("DISPLAY_TIMEZONE")),
        request_timeout_seconds=request_timeout_seconds,
        fetch_retry_attempts=fetch_retry_attempts,
        telegram_bot_token=telegram_bot_token,
        telegram_chat_ids=telegram_chat_ids,
    )
