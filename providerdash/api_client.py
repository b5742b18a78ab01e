"""HTTP client for the two read endpoints the dashboard consumes."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_exponential

from providerdash.config import Settings
from providerdash.domain import (
    Appointment,
    AppointmentUser,
    DataServiceAuthError,
    DataServiceConnectionError,
    DataServicePayloadError,
    DataServiceRequestError,
    MonthAvailabilityEntry,
)

logger = logging.getLogger(__name__)


def _failure_reason(retry_state: RetryCallState) -> str:
    outcome = retry_state.outcome
    exc = outcome.exception() if outcome is not None and outcome.failed else None
    if exc is None:
        return "unknown"
    detail = str(exc).strip()
    return type(exc).__name__ + (f" ({detail})" if detail else "")


def _log_before_sleep(retry_state: RetryCallState) -> None:
    sleep_seconds = getattr(retry_state.next_action, "sleep", None)
    reason = _failure_reason(retry_state)
    if sleep_seconds is None:
        logger.info("Retrying read (attempt %s failed: %s)", retry_state.attempt_number, reason)
        return
    logger.info(
        "Retrying read in %.1f s (attempt %s failed: %s)",
        sleep_seconds,
        retry_state.attempt_number,
        reason,
    )


def parse_timestamp(raw: str, tz: dt.tzinfo) -> dt.datetime:
    """Parse an ISO-8601 timestamp; values without an offset are taken as `tz` local time."""
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    value = dt.datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz)
    return value


def _parse_availability(payload: Any) -> list[MonthAvailabilityEntry]:
    if not isinstance(payload, list):
        raise DataServicePayloadError("month-availability: expected a list")

    entries: list[MonthAvailabilityEntry] = []
    for item in payload:
        try:
            raw_day = item["day"]
            available = item["available"]
            if isinstance(raw_day, bool):
                raise ValueError("day must be a number")
            day = int(raw_day)
        except (KeyError, TypeError, ValueError) as e:
            raise DataServicePayloadError(f"month-availability: bad item {item!r}") from e
        if not isinstance(available, bool) or not 1 <= day <= 31:
            raise DataServicePayloadError(f"month-availability: bad item {item!r}")
        entries.append(MonthAvailabilityEntry(day=day, available=available))
    return entries


def _parse_appointments(payload: Any, tz: dt.tzinfo) -> list[Appointment]:
    if not isinstance(payload, list):
        raise DataServicePayloadError("appointments: expected a list")

    appointments: list[Appointment] = []
    for item in payload:
        try:
            user = item.get("user") or {}
            appointments.append(
                Appointment(
                    id=str(item["id"]),
                    date=parse_timestamp(str(item["date"]), tz),
                    user=AppointmentUser(
                        name=str(user.get("name", "")),
                        avatar_url=str(user.get("avatar_url") or user.get("avatarUrl") or ""),
                    ),
                )
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise DataServicePayloadError(f"appointments: bad item {item!r}") from e
    return appointments


class DataServiceClient:
    """Remote data service: month availability and the user's day appointments."""

    def __init__(self, settings: Settings, http: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self._token = settings.api_token
        self.http = http or httpx.AsyncClient(
            base_url=settings.api_base_url,
            timeout=httpx.Timeout(settings.request_timeout_seconds),
        )

    def set_token(self, token: str | None) -> None:
        self._token = token

    async def aclose(self) -> None:
        await self.http.aclose()

    async def _get_once(self, path: str, params: dict[str, Any]) -> Any:
        headers: dict[str, str] = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            response = await self.http.get(path, params=params, headers=headers)
        except httpx.TimeoutException as exc:
            raise DataServiceConnectionError(f"Request to {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise DataServiceConnectionError(f"Request to {path} failed: {exc}") from exc

        if response.status_code in {401, 403}:
            raise DataServiceAuthError(f"{path}: HTTP {response.status_code}")
        if response.status_code >= 400:
            raise DataServiceRequestError(f"{path}: HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise DataServicePayloadError(f"{path}: response is not JSON") from exc

    async def get(self, path: str, params: dict[str, Any]) -> Any:
        # Only transport failures are retried; HTTP errors are answers.
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.settings.fetch_retry_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            retry=retry_if_exception_type(DataServiceConnectionError),
            before_sleep=_log_before_sleep,
            reraise=True,
        ):
            with attempt:
                return await self._get_once(path, params)

    async def get_month_availability(self, provider_id: str, year: int, month: int) -> list[MonthAvailabilityEntry]:
        logger.debug("GET month availability provider=%s %04d-%02d", provider_id, year, month)
        payload = await self.get(
            f"/providers/{provider_id}/month-availability",
            params={"year": year, "month": month},
        )
        return _parse_availability(payload)

    async def get_day_appointments(self, day: int, month: int, year: int) -> list[Appointment]:
        logger.debug("GET appointments %04d-%02d-%02d", year, month, day)
        payload = await self.get(
            "/appointments/me",
            params={"day": day, "month": month, "year": year},
        )
        return _parse_appointments(payload, self.settings.display_timezone)
