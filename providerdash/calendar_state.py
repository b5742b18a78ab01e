from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Collection

from providerdash.availability import WEEKEND
from providerdash.domain import DayEligibility, YearMonth

logger = logging.getLogger(__name__)


_MONTHS_PT = (
    "janeiro",
    "fevereiro",
    "março",
    "abril",
    "maio",
    "junho",
    "julho",
    "agosto",
    "setembro",
    "outubro",
    "novembro",
    "dezembro",
)

# date.weekday(): Monday == 0
_WEEKDAYS_PT = (
    "segunda-feira",
    "terça-feira",
    "quarta-feira",
    "quinta-feira",
    "sexta-feira",
    "sábado",
    "domingo",
)


def month_name(month: int) -> str:
    return _MONTHS_PT[month - 1]


def selected_date_text(day: dt.date) -> str:
    # e.g. "Dia 05 de abril"
    return f"Dia {day.day:02d} de {month_name(day.month)}"


def week_day_name(day: dt.date) -> str:
    return _WEEKDAYS_PT[day.weekday()]


def eligibility_for(day: dt.date, disabled: Collection[dt.date]) -> DayEligibility:
    """What the calendar widget reports for `day`: weekdays are available,
    weekends and server-disabled days are disabled."""
    weekend = day.weekday() in WEEKEND
    return DayEligibility(available=not weekend, disabled=weekend or day in disabled)


@dataclass
class CalendarState:
    selected_date: dt.date
    browsed_month: YearMonth

    @classmethod
    def starting_at(cls, today: dt.date) -> CalendarState:
        return cls(selected_date=today, browsed_month=YearMonth.of(today))

    def select_day(self, day: dt.date, eligibility: DayEligibility) -> bool:
        """Select `day` if the widget says it can be picked; otherwise ignore the click."""
        if not eligibility.selectable:
            logger.debug("Ignoring click on %s (%s)", day.isoformat(), eligibility)
            return False
        changed = day != self.selected_date
        self.selected_date = day
        return changed

    def browse_month(self, month: YearMonth) -> bool:
        changed = month != self.browsed_month
        self.browsed_month = month
        return changed
