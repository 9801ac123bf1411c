"""
Therapist availability parsing and slot resolution.

The ``therapists.availability`` column has no enforced schema. Most rows hold
a list of ``{"date": "YYYY-MM-DD", "slots": ["09:00", ...]}`` entries, older
rows hold that same list JSON-encoded as a string, and some hold nothing
usable at all. ``parse_availability`` turns whatever is stored into one of
three shapes and never raises:

- ``Structured``: a usable list of days
- ``Raw``: a string that could not be decoded (kept for diagnostics)
- ``Missing``: nothing usable

Anything other than ``Structured`` falls back to a default booking window so a
broken row only degrades the booking page instead of breaking it.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_SLOTS = ["09:00", "10:00", "11:00", "14:00", "15:00", "16:00"]
DEFAULT_WINDOW_DAYS = 7


@dataclass(frozen=True)
class AvailabilityDay:
    date: str
    slots: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Structured:
    days: list[AvailabilityDay]


@dataclass(frozen=True)
class Raw:
    text: str


@dataclass(frozen=True)
class Missing:
    pass


Availability = Union[Structured, Raw, Missing]


def _to_day(entry: Any) -> Optional[AvailabilityDay]:
    if not isinstance(entry, dict):
        return None
    day = entry.get("date")
    if not isinstance(day, str) or not day:
        return None
    slots = entry.get("slots")
    if not isinstance(slots, list):
        slots = []
    return AvailabilityDay(date=day, slots=[str(s) for s in slots])


def _from_list(entries: list) -> Availability:
    days = [d for d in (_to_day(e) for e in entries) if d is not None]
    if not days:
        return Missing()
    return Structured(days=days)


def parse_availability(value: Any) -> Availability:
    """Classify a stored availability value. Never raises."""
    if value is None:
        return Missing()

    if isinstance(value, str):
        if not value.strip():
            return Missing()
        try:
            decoded = json.loads(value)
        except ValueError:
            logger.warning("⚠️ Could not decode availability string, using default window")
            return Raw(text=value)
        if isinstance(decoded, list):
            return _from_list(decoded)
        return Missing()

    if isinstance(value, list):
        return _from_list(value)

    return Missing()


def default_dates(today: date) -> list[str]:
    """today+1 through today+7"""
    return [(today + timedelta(days=i)).isoformat() for i in range(1, DEFAULT_WINDOW_DAYS + 1)]


def available_dates(availability: Availability, today: date) -> list[str]:
    if isinstance(availability, Structured):
        return [day.date for day in availability.days]
    return default_dates(today)


def initial_date(availability: Availability, today: date) -> str:
    """Date preselected when the booking page opens"""
    return available_dates(availability, today)[0]


def slots_for_date(availability: Availability, selected_date: str) -> list[str]:
    """
    Slots offered on ``selected_date``.

    Dates are matched by exact string equality, so "2025-01-05" does not match
    "2025-1-5"; a mismatch yields no slots rather than an error.
    """
    if isinstance(availability, Structured):
        for day in availability.days:
            if day.date == selected_date:
                return list(day.slots)
        return []
    return list(DEFAULT_SLOTS)
