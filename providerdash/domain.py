from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class YearMonth:
    """A calendar month, the unit the availability calendar is browsed in."""

    year: int
    month: int  # 1..12

    @classmethod
    def of(cls, day: dt.date) -> YearMonth:
        return cls(year=day.year, month=day.month)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class User:
    id: str
    name: str
    avatar_url: str = ""


@dataclass(frozen=True)
class MonthAvailabilityEntry:
    day: int  # 1..31
    available: bool


@dataclass(frozen=True)
class AppointmentUser:
    name: str
    avatar_url: str = ""


@dataclass(frozen=True)
class Appointment:
    """A booked appointment on the selected day.

    `hour_formatted` is computed once when the day agenda is fetched.
    """

    id: str
    date: dt.datetime  # timezone aware
    user: AppointmentUser
    hour_formatted: str = ""


@dataclass(frozen=True)
class DayEligibility:
    """What the calendar widget knows about a clicked day."""

    available: bool
    disabled: bool

    @property
    def selectable(self) -> bool:
        return self.available and not self.disabled


class RefreshStatus(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERRORED = "errored"


class DataServiceError(RuntimeError):
    """A read from the remote data service failed (network or server side).

    The dashboard recovers from it locally by keeping the last good snapshot.
    """


class DataServiceConnectionError(DataServiceError):
    """Transport failure or timeout."""


class DataServiceAuthError(DataServiceError):
    """The service rejected our credentials (401/403)."""


class DataServiceRequestError(DataServiceError):
    """Any other non-2xx response."""


class DataServicePayloadError(DataServiceError):
    """The response body does not look like what the endpoint promises."""
