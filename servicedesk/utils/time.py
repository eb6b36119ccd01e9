from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

import dateparser
from tzlocal import get_localzone_name

_ISO_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC and normalize aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_local_timezone() -> str:
    try:
        return get_localzone_name()
    except Exception:
        return "UTC"


def parse_day(value: date | datetime | str, timezone_name: str | None = None) -> date:
    """
    Resolve a filter bound to a calendar day.

    Accepts ``date``/``datetime`` objects, ISO dates ("2024-01-02") and the
    phrases dateparser understands ("yesterday", "3 days ago").
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = value.strip()
    if _ISO_PREFIX.match(text):
        # anything shaped like an ISO date must be one in full, e.g. "2024-01-02xyz" is refused
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError as exc:
            raise ValueError(f"Unrecognized date '{value}'") from exc

    tz = timezone_name or get_local_timezone()
    settings = {
        "RETURN_AS_TIMEZONE_AWARE": True,
        "TIMEZONE": tz,
        "TO_TIMEZONE": tz,
        "PREFER_DATES_FROM": "past",
        "DATE_ORDER": "YMD",
    }
    parsed = dateparser.parse(text, settings=settings)
    if not parsed:
        raise ValueError(f"Unrecognized date '{value}'")
    return parsed.date()


def start_of_day(day: date, timezone_name: str) -> datetime:
    return datetime.combine(day, time.min, tzinfo=ZoneInfo(timezone_name))


def end_of_day(day: date, timezone_name: str) -> datetime:
    return datetime.combine(day, time.max, tzinfo=ZoneInfo(timezone_name))
