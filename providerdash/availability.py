from __future__ import annotations

import calendar
import datetime as dt
import logging
from typing import Awaitable, Callable, Iterable, Sequence

from providerdash.domain import MonthAvailabilityEntry, RefreshStatus, YearMonth
from providerdash.notifier import FailureReporter
from providerdash.query import DerivedQuery

logger = logging.getLogger(__name__)

WEEKEND = frozenset({calendar.SATURDAY, calendar.SUNDAY})

MonthSnapshot = tuple[YearMonth | None, list[MonthAvailabilityEntry]]
FetchMonth = Callable[[str, int, int], Awaitable[Sequence[MonthAvailabilityEntry]]]


def month_days(month: YearMonth) -> list[dt.date]:
    _, count = calendar.monthrange(month.year, month.month)
    return [dt.date(month.year, month.month, d) for d in range(1, count + 1)]


def weekend_dates(month: YearMonth) -> list[dt.date]:
    return [d for d in month_days(month) if d.weekday() in WEEKEND]


def unavailable_dates(entries: Iterable[MonthAvailabilityEntry], month: YearMonth) -> list[dt.date]:
    """Server-marked unavailable days, placed in `month`."""
    _, count = calendar.monthrange(month.year, month.month)
    dates: list[dt.date] = []
    for entry in entries:
        if entry.available:
            continue
        if not 1 <= entry.day <= count:
            logger.warning("Skipping availability entry for day %d: %s has %d days", entry.day, month, count)
            continue
        dates.append(dt.date(month.year, month.month, entry.day))
    return dates


def disabled_dates(entries: Iterable[MonthAvailabilityEntry], month: YearMonth) -> list[dt.date]:
    """Days that can't be picked: unavailable days plus every weekend day of `month`."""
    return sorted(set(unavailable_dates(entries, month)) | set(weekend_dates(month)))


class AvailabilityCache:
    """Month availability of one provider, refetched when the browsed month changes."""

    def __init__(self, provider_id: str, fetch: FetchMonth, *, reporter: FailureReporter | None = None) -> None:
        self.provider_id = provider_id
        self._fetch = fetch
        self._query: DerivedQuery[YearMonth, MonthSnapshot] = DerivedQuery(
            "month-availability", self._load, (None, []), reporter=reporter
        )

    async def _load(self, month: YearMonth) -> MonthSnapshot:
        entries = await self._fetch(self.provider_id, month.year, month.month)
        logger.info("Month availability %s: %d entries", month, len(entries))
        return month, list(entries)

    @property
    def month(self) -> YearMonth | None:
        """The month the cached entries belong to."""
        return self._query.value[0]

    @property
    def entries(self) -> list[MonthAvailabilityEntry]:
        return self._query.value[1]

    def entries_for(self, month: YearMonth) -> list[MonthAvailabilityEntry]:
        # Entries of another month are never projected onto this one.
        loaded, entries = self._query.value
        return entries if loaded == month else []

    def disabled_dates(self, month: YearMonth) -> list[dt.date]:
        return disabled_dates(self.entries_for(month), month)

    @property
    def status(self) -> RefreshStatus:
        return self._query.status

    def refresh(self, year: int, month: int):
        return self._query.refresh(YearMonth(year, month))

    def browse(self, month: YearMonth):
        return self._query.set_key(month)

    async def settle(self) -> None:
        await self._query.settle()

    async def close(self) -> None:
        await self._query.close()

    def reopen(self) -> None:
        self._query.reopen()
