"""Time conversion helpers and birth input validation.

Every engine computation runs on Julian Day numbers in Universal Time. Birth
data enters the system as local civil date and time plus a fixed UTC offset,
which :class:`BirthInput` validates and converts exactly once before any
position is requested.
"""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from typing import Final

__all__ = [
    "BirthInput",
    "InputValidationError",
    "MAX_UTC_OFFSET",
    "MIN_UTC_OFFSET",
    "SECONDS_PER_DAY",
    "ensure_utc",
    "jd_to_datetime",
    "julian_day",
    "parse_utc_offset",
]


SECONDS_PER_DAY: Final[float] = 86_400.0
MIN_UTC_OFFSET: Final[float] = -12.0
MAX_UTC_OFFSET: Final[float] = 14.0

_UNIX_EPOCH_JD: Final[float] = 2440587.5


class InputValidationError(ValueError):
    """Raised when birth date, time or UTC offset input is malformed."""

    def __init__(self, message: str, *, field: str, value: object) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


def ensure_utc(moment: _dt.datetime) -> _dt.datetime:
    """Return ``moment`` converted to UTC (naive values are taken as UTC)."""

    tzinfo = moment.tzinfo
    if tzinfo is None:
        return moment.replace(tzinfo=_dt.UTC)
    return moment.astimezone(_dt.UTC)


def julian_day(moment: _dt.datetime) -> float:
    """Return the Julian day for a UTC ``moment`` (Gregorian calendar)."""

    moment = ensure_utc(moment)
    year = moment.year
    month = moment.month
    day = moment.day
    frac = (
        moment.hour + moment.minute / 60.0 + (moment.second + moment.microsecond / 1e6) / 3600.0
    ) / 24.0

    if month <= 2:
        year -= 1
        month += 12

    a = year // 100
    b = 2 - a + (a // 4)
    jd = int(365.25 * (year + 4716)) + int(30.6001 * (month + 1)) + day + b - 1524.5
    return jd + frac


def jd_to_datetime(jd_ut: float) -> _dt.datetime:
    """Return the UTC ``datetime`` for a Julian day in Universal Time."""

    seconds = (jd_ut - _UNIX_EPOCH_JD) * SECONDS_PER_DAY
    epoch = _dt.datetime(1970, 1, 1, tzinfo=_dt.UTC)
    return epoch + _dt.timedelta(seconds=seconds)


def _parse_int(token: str, *, field: str, raw: str) -> int:
    try:
        return int(token)
    except ValueError as exc:
        raise InputValidationError(
            f"Invalid {field} component '{token}' in '{raw}'", field=field, value=raw
        ) from exc


def _parse_date(raw: str) -> _dt.date:
    parts = raw.strip().split("-")
    if len(parts) != 3 or not all(parts):
        raise InputValidationError(
            f"Invalid date '{raw}'. Expected YYYY-MM-DD", field="date", value=raw
        )
    year, month, day = (_parse_int(part, field="date", raw=raw) for part in parts)
    if not 1 <= month <= 12:
        raise InputValidationError(
            f"Month must be between 1 and 12, got {month}", field="date", value=raw
        )
    try:
        return _dt.date(year, month, day)
    except ValueError as exc:
        raise InputValidationError(
            f"Invalid calendar date '{raw}': {exc}", field="date", value=raw
        ) from exc


def _parse_time(raw: str) -> _dt.time:
    parts = raw.strip().split(":")
    if len(parts) != 2 or not all(parts):
        raise InputValidationError(
            f"Invalid time '{raw}'. Expected HH:MM", field="time", value=raw
        )
    hour, minute = (_parse_int(part, field="time", raw=raw) for part in parts)
    if not 0 <= hour <= 23:
        raise InputValidationError(
            f"Hour must be between 0 and 23, got {hour}", field="time", value=raw
        )
    if not 0 <= minute <= 59:
        raise InputValidationError(
            f"Minute must be between 0 and 59, got {minute}", field="time", value=raw
        )
    return _dt.time(hour, minute)


def parse_utc_offset(raw: str | float | int) -> float:
    """Return a UTC offset in hours from ``raw`` such as ``"+3"`` or ``"-5.5"``."""

    if isinstance(raw, bool):
        raise InputValidationError(
            f"Invalid UTC offset {raw!r}", field="utc_offset", value=raw
        )
    if isinstance(raw, (int, float)):
        offset = float(raw)
    else:
        token = str(raw).strip()
        try:
            offset = float(token)
        except ValueError as exc:
            raise InputValidationError(
                f"Invalid UTC offset '{raw}'. Expected a number such as +3, -5, +5.5",
                field="utc_offset",
                value=raw,
            ) from exc
    if offset != offset or not MIN_UTC_OFFSET <= offset <= MAX_UTC_OFFSET:
        raise InputValidationError(
            f"UTC offset must be between {MIN_UTC_OFFSET:+g} and {MAX_UTC_OFFSET:+g}, got {raw}",
            field="utc_offset",
            value=raw,
        )
    return offset


@dataclass(frozen=True)
class BirthInput:
    """Validated local birth moment with its fixed UTC offset in hours."""

    date: _dt.date
    time: _dt.time
    utc_offset: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "utc_offset", parse_utc_offset(self.utc_offset))
        # Dates at the calendar edges can leave the datetime range once shifted to UTC.
        try:
            self.utc_datetime
        except OverflowError as exc:
            raise InputValidationError(
                f"Birth moment {self.date.isoformat()} {self.time.strftime('%H:%M')} "
                f"at UTC{self.utc_offset:+g} falls outside the supported calendar range",
                field="date",
                value=self.date.isoformat(),
            ) from exc

    @classmethod
    def parse(
        cls, date: str, time: str, utc_offset: str | float | int
    ) -> BirthInput:
        """Validate textual ``date``/``time``/``utc_offset`` input."""

        return cls(
            date=_parse_date(str(date)),
            time=_parse_time(str(time)),
            utc_offset=parse_utc_offset(utc_offset),
        )

    @property
    def utc_datetime(self) -> _dt.datetime:
        tz = _dt.timezone(_dt.timedelta(hours=self.utc_offset))
        local = _dt.datetime.combine(self.date, self.time, tzinfo=tz)
        return local.astimezone(_dt.UTC)

    @property
    def julian_day(self) -> float:
        return julian_day(self.utc_datetime)

    def to_payload(self) -> dict[str, object]:
        return {
            "date": self.date.isoformat(),
            "time": self.time.strftime("%H:%M"),
            "utc_offset": self.utc_offset,
        }
