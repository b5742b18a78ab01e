from __future__ import annotations

import datetime as dt

from providerdash.dashboard import DashboardView
from providerdash.domain import Appointment, AppointmentUser, RefreshStatus, User, YearMonth
from providerdash.render import EMPTY_PERIOD, render_dashboard, render_month

UTC = dt.timezone.utc


def _view(**overrides) -> DashboardView:
    upcoming = Appointment(
        id="2",
        date=dt.datetime(2024, 4, 10, 14, 30, tzinfo=UTC),
        user=AppointmentUser(name="Caio"),
        hour_formatted="14:30",
    )
    values = dict(
        user=User(id="42", name="Ana"),
        selected_date=dt.date(2024, 4, 10),
        browsed_month=YearMonth(2024, 4),
        is_today=True,
        selected_date_text="Dia 10 de abril",
        selected_week_day="quarta-feira",
        disabled_dates=(dt.date(2024, 4, 5), dt.date(2024, 4, 6), dt.date(2024, 4, 7)),
        morning_appointments=(),
        afternoon_appointments=(upcoming,),
        next_appointment=upcoming,
        availability_status=RefreshStatus.READY,
        agenda_status=RefreshStatus.READY,
    )
    values.update(overrides)
    return DashboardView(**values)


def test_render_today_with_next_appointment() -> None:
    text = render_dashboard(_view())

    assert "Bem-vindo, Ana" in text
    assert "Hoje | Dia 10 de abril | quarta-feira" in text
    assert "Agendamento a seguir\n  Caio  14:30" in text
    assert f"Manhã\n  {EMPTY_PERIOD}" in text
    assert "Tarde\n  14:30  Caio" in text


def test_render_other_day_hides_next_appointment() -> None:
    text = render_dashboard(_view(is_today=False))

    assert "Hoje" not in text
    assert "Agendamento a seguir" not in text


def test_render_mentions_failed_refreshes() -> None:
    text = render_dashboard(_view(agenda_status=RefreshStatus.ERRORED, availability_status=RefreshStatus.ERRORED))

    assert "agenda could not be refreshed" in text
    assert "availability could not be refreshed" in text


def test_render_month_marks_disabled_and_selected_days() -> None:
    lines = render_month(_view())

    assert lines[0].strip() == "Abril 2024"
    assert lines[1] == " D   S   T   Q   Q   S   S"
    # April 1st 2024 is a Monday: one blank Sunday cell first.
    assert lines[2] == "     1   2   3   4  --  --"
    assert lines[3].startswith("--   8   9  10* 11")
