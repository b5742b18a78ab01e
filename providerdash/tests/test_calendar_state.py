from __future__ import annotations

import datetime as dt

from providerdash.calendar_state import CalendarState, eligibility_for, selected_date_text, week_day_name
from providerdash.domain import DayEligibility, YearMonth


def _state() -> CalendarState:
    return CalendarState.starting_at(dt.date(2024, 4, 10))


def test_starts_at_today() -> None:
    state = _state()
    assert state.selected_date == dt.date(2024, 4, 10)
    assert state.browsed_month == YearMonth(2024, 4)


def test_unavailable_click_is_ignored() -> None:
    state = _state()

    assert state.select_day(dt.date(2024, 4, 13), DayEligibility(available=False, disabled=True)) is False
    assert state.select_day(dt.date(2024, 4, 15), DayEligibility(available=False, disabled=False)) is False
    assert state.selected_date == dt.date(2024, 4, 10)


def test_disabled_click_is_ignored() -> None:
    state = _state()

    assert state.select_day(dt.date(2024, 4, 12), DayEligibility(available=True, disabled=True)) is False
    assert state.selected_date == dt.date(2024, 4, 10)


def test_available_click_selects() -> None:
    state = _state()

    assert state.select_day(dt.date(2024, 4, 11), DayEligibility(available=True, disabled=False)) is True
    assert state.selected_date == dt.date(2024, 4, 11)


def test_browse_month_is_unconditional_and_keeps_selection() -> None:
    state = _state()

    assert state.browse_month(YearMonth(1999, 1)) is True
    assert state.browsed_month == YearMonth(1999, 1)
    assert state.selected_date == dt.date(2024, 4, 10)
    assert state.browse_month(YearMonth(1999, 1)) is False


def test_eligibility_follows_weekdays_and_disabled_dates() -> None:
    disabled = {dt.date(2024, 4, 12)}

    assert eligibility_for(dt.date(2024, 4, 11), disabled) == DayEligibility(available=True, disabled=False)
    assert eligibility_for(dt.date(2024, 4, 12), disabled) == DayEligibility(available=True, disabled=True)
    assert eligibility_for(dt.date(2024, 4, 13), disabled) == DayEligibility(available=False, disabled=True)


def test_selected_date_texts() -> None:
    assert selected_date_text(dt.date(2024, 4, 5)) == "Dia 05 de abril"
    assert week_day_name(dt.date(2024, 4, 10)) == "quarta-feira"
    assert week_day_name(dt.date(2024, 4, 14)) == "domingo"
