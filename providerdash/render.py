from __future__ import annotations

from typing import Iterable

from providerdash.availability import month_days
from providerdash.calendar_state import month_name
from providerdash.dashboard import DashboardView
from providerdash.domain import Appointment, RefreshStatus

EMPTY_PERIOD = "Nenhum agendamento nesse período."

# Sunday first, like the web calendar.
_WEEKDAY_HEADER = " ".join(f"{d:>2} " for d in "DSTQQSS").rstrip()


def _format_appointments(appointments: Iterable[Appointment]) -> list[str]:
    lines = [f"  {a.hour_formatted}  {a.user.name}" for a in appointments]
    return lines or [f"  {EMPTY_PERIOD}"]


def render_month(view: DashboardView) -> list[str]:
    """Month grid; disabled days are shown as `--`, the selected day with a `*`."""
    month = view.browsed_month
    disabled = set(view.disabled_dates)
    lines = [f"{month_name(month.month).capitalize()} {month.year}".center(len(_WEEKDAY_HEADER)), _WEEKDAY_HEADER]

    days = month_days(month)
    # date.weekday(): Monday == 0; the grid starts on Sunday.
    cells = ["   "] * ((days[0].weekday() + 1) % 7)
    for day in days:
        if day == view.selected_date:
            cells.append(f"{day.day:2d}*")
        elif day in disabled:
            cells.append("-- ")
        else:
            cells.append(f"{day.day:2d} ")

    for start in range(0, len(cells), 7):
        lines.append(" ".join(cells[start : start + 7]).rstrip())
    return lines


def render_dashboard(view: DashboardView) -> str:
    lines: list[str] = [f"Bem-vindo, {view.user.name}", "", "Horários agendados"]

    header = [view.selected_date_text, view.selected_week_day]
    if view.is_today:
        header.insert(0, "Hoje")
    lines.append(" | ".join(header))

    if view.show_next_appointment and view.next_appointment is not None:
        upcoming = view.next_appointment
        lines += ["", "Agendamento a seguir", f"  {upcoming.user.name}  {upcoming.hour_formatted}"]

    lines += ["", "Manhã", *_format_appointments(view.morning_appointments)]
    lines += ["", "Tarde", *_format_appointments(view.afternoon_appointments)]

    if view.agenda_status is RefreshStatus.ERRORED:
        lines += ["", "(agenda could not be refreshed, showing last known data)"]

    lines += ["", *render_month(view)]
    if view.availability_status is RefreshStatus.ERRORED:
        lines += ["(availability could not be refreshed)"]

    return "\n".join(lines) + "\n"
