from __future__ import annotations

import asyncio
import datetime as dt
import logging
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from providerdash.agenda import DayAgenda, is_today
from providerdash.auth import AuthSession
from providerdash.availability import WEEKEND, AvailabilityCache
from providerdash.calendar_state import CalendarState, eligibility_for, selected_date_text, week_day_name
from providerdash.domain import (
    Appointment,
    DayEligibility,
    MonthAvailabilityEntry,
    RefreshStatus,
    User,
    YearMonth,
)
from providerdash.notifier import FailureReporter, LoggingReporter

logger = logging.getLogger(__name__)


class DataService(Protocol):
    async def get_month_availability(self, provider_id: str, year: int, month: int) -> Sequence[MonthAvailabilityEntry]: ...

    async def get_day_appointments(self, day: int, month: int, year: int) -> Sequence[Appointment]: ...


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@dataclass(frozen=True)
class DashboardView:
    """Everything the presentation layer needs for one render."""

    user: User
    selected_date: dt.date
    browsed_month: YearMonth
    is_today: bool
    selected_date_text: str
    selected_week_day: str
    disabled_dates: tuple[dt.date, ...]
    morning_appointments: tuple[Appointment, ...]
    afternoon_appointments: tuple[Appointment, ...]
    next_appointment: Appointment | None
    availability_status: RefreshStatus
    agenda_status: RefreshStatus

    @property
    def show_next_appointment(self) -> bool:
        # The upcoming appointment only makes sense for today's agenda.
        return self.is_today and self.next_appointment is not None


class Dashboard:
    """View state of the provider's scheduling dashboard.

    Calendar events (`select_day`, `browse_month`) are plain synchronous
    callbacks. They schedule refreshes on the running event loop and return
    the task, or None when nothing had to be fetched.
    """

    def __init__(
        self,
        auth: AuthSession,
        service: DataService,
        *,
        tz: dt.tzinfo = dt.timezone.utc,
        reporter: FailureReporter | None = None,
        clock: Callable[[], dt.datetime] = _utcnow,
    ) -> None:
        self.auth = auth
        self.tz = tz
        self._clock = clock
        reporter = reporter or LoggingReporter()

        self.availability = AvailabilityCache(auth.user.id, service.get_month_availability, reporter=reporter)
        self.agenda = DayAgenda(service.get_day_appointments, tz, reporter=reporter)
        self.calendar: CalendarState | None = None

    def now(self) -> dt.datetime:
        return self._clock()

    def today(self) -> dt.date:
        return self.now().astimezone(self.tz).date()

    def _state(self) -> CalendarState:
        if self.calendar is None:
            raise RuntimeError("Dashboard is not mounted")
        return self.calendar

    def mount(self) -> list[asyncio.Task[None]]:
        """Start at today and read both the month and the day, also on a remount."""
        today = self.today()
        self.calendar = CalendarState.starting_at(today)
        self.availability.reopen()
        self.agenda.reopen()
        logger.info("Dashboard mounted for user id=%s at %s", self.auth.user.id, today.isoformat())
        month = self.calendar.browsed_month
        return [
            self.availability.refresh(month.year, month.month),
            self.agenda.refresh(self.calendar.selected_date),
        ]

    def select_day(self, day: dt.date, eligibility: DayEligibility | None = None) -> asyncio.Task[None] | None:
        state = self._state()
        if eligibility is None:
            eligibility = self.eligibility_for(day)
        if not state.select_day(day, eligibility):
            return None
        return self.agenda.select(state.selected_date)

    def browse_month(self, month: YearMonth | dt.date) -> asyncio.Task[None] | None:
        if isinstance(month, dt.date):
            month = YearMonth.of(month)
        state = self._state()
        if not state.browse_month(month):
            return None
        return self.availability.browse(month)

    def eligibility_for(self, day: dt.date) -> DayEligibility:
        """Eligibility as the calendar reports it for a click on `day`.

        Only days of the browsed month can be clicked, and only once that
        month's availability has been loaded.
        """
        state = self._state()
        month = YearMonth.of(day)
        if month != state.browsed_month or self.availability.month != month:
            return DayEligibility(available=day.weekday() not in WEEKEND, disabled=True)
        return eligibility_for(day, set(self.availability.disabled_dates(month)))

    def disabled_dates(self) -> list[dt.date]:
        return self.availability.disabled_dates(self._state().browsed_month)

    def morning_appointments(self) -> list[Appointment]:
        return self.agenda.morning()

    def afternoon_appointments(self) -> list[Appointment]:
        return self.agenda.afternoon()

    def next_appointment(self) -> Appointment | None:
        return self.agenda.next_appointment(self.now())

    def is_today(self) -> bool:
        return is_today(self._state().selected_date, self.now(), self.tz)

    def view(self) -> DashboardView:
        state = self._state()
        return DashboardView(
            user=self.auth.user,
            selected_date=state.selected_date,
            browsed_month=state.browsed_month,
            is_today=self.is_today(),
            selected_date_text=selected_date_text(state.selected_date),
            selected_week_day=week_day_name(state.selected_date),
            disabled_dates=tuple(self.disabled_dates()),
            morning_appointments=tuple(self.morning_appointments()),
            afternoon_appointments=tuple(self.afternoon_appointments()),
            next_appointment=self.next_appointment(),
            availability_status=self.availability.status,
            agenda_status=self.agenda.status,
        )

    def sign_out(self) -> None:
        self.auth.sign_out()

    async def settle(self) -> None:
        """Wait for every in-flight refresh."""
        await asyncio.gather(self.availability.settle(), self.agenda.settle())

    async def unmount(self) -> None:
        await asyncio.gather(self.availability.close(), self.agenda.close())
        logger.info("Dashboard unmounted")


async def run_once(
    dashboard: Dashboard,
    *,
    month: YearMonth | None = None,
    day: dt.date | None = None,
) -> DashboardView:
    """Mount, optionally browse and click a day, wait for the data, and return the view."""
    dashboard.mount()
    await dashboard.settle()
    if day is not None and month is None:
        month = YearMonth.of(day)
    if month is not None:
        dashboard.browse_month(month)
        await dashboard.settle()
    if day is not None:
        dashboard.select_day(day)
        if dashboard.view().selected_date != day:
            logger.warning("%s can't be selected, keeping %s", day.isoformat(), dashboard.view().selected_date.isoformat())
    await dashboard.settle()
    return dashboard.view()
