from __future__ import annotations

import dataclasses
import datetime as dt
import logging
from typing import Awaitable, Callable, Iterable, Sequence

from providerdash.domain import Appointment, RefreshStatus
from providerdash.notifier import FailureReporter
from providerdash.query import DerivedQuery

logger = logging.getLogger(__name__)

NOON = 12

FetchDay = Callable[[int, int, int], Awaitable[Sequence[Appointment]]]


def format_hour(value: dt.datetime, tz: dt.tzinfo) -> str:
    return value.astimezone(tz).strftime("%H:%M")


def with_hours(appointments: Iterable[Appointment], tz: dt.tzinfo) -> list[Appointment]:
    return [dataclasses.replace(a, hour_formatted=format_hour(a.date, tz)) for a in appointments]


def local_hour(appointment: Appointment, tz: dt.tzinfo) -> int:
    return appointment.date.astimezone(tz).hour


def morning(appointments: Iterable[Appointment], tz: dt.tzinfo) -> list[Appointment]:
    return [a for a in appointments if local_hour(a, tz) < NOON]


def afternoon(appointments: Iterable[Appointment], tz: dt.tzinfo) -> list[Appointment]:
    return [a for a in appointments if local_hour(a, tz) >= NOON]


def next_appointment(appointments: Iterable[Appointment], now: dt.datetime) -> Appointment | None:
    """The earliest appointment strictly after `now`, if any."""
    upcoming = [a for a in appointments if a.date > now]
    if not upcoming:
        return None
    return min(upcoming, key=lambda a: a.date)


def is_today(day: dt.date, now: dt.datetime, tz: dt.tzinfo) -> bool:
    return day == now.astimezone(tz).date()


class DayAgenda:
    """Appointments of the selected day, refetched whenever the day changes."""

    def __init__(self, fetch: FetchDay, tz: dt.tzinfo, *, reporter: FailureReporter | None = None) -> None:
        self.tz = tz
        self._fetch = fetch
        self._query: DerivedQuery[dt.date, list[Appointment]] = DerivedQuery(
            "day-appointments", self._load, [], reporter=reporter
        )

    async def _load(self, day: dt.date) -> list[Appointment]:
        fetched = await self._fetch(day.day, day.month, day.year)
        logger.info("Appointments %s: %d", day.isoformat(), len(fetched))
        return with_hours(fetched, self.tz)

    @property
    def appointments(self) -> list[Appointment]:
        return self._query.value

    @property
    def status(self) -> RefreshStatus:
        return self._query.status

    def refresh(self, selected_date: dt.date):
        return self._query.refresh(selected_date)

    def select(self, selected_date: dt.date):
        return self._query.set_key(selected_date)

    def morning(self) -> list[Appointment]:
        return morning(self.appointments, self.tz)

    def afternoon(self) -> list[Appointment]:
        return afternoon(self.appointments, self.tz)

    def next_appointment(self, now: dt.datetime) -> Appointment | None:
        return next_appointment(self.appointments, now)

    async def settle(self) -> None:
        await self._query.settle()

    async def close(self) -> None:
        await self._query.close()

    def reopen(self) -> None:
        self._query.reopen()
