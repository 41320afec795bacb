"""
Coach availability: weekday name -> ordered, non-overlapping time-of-day slots.

Read only to render schedules; task timing is never checked against it.
"""
from datetime import time
from typing import Any

from coaching.domain.errors import CoachingValidationError

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
DEFAULT_SLOT = {"start": "09:00", "end": "17:00"}


class AvailabilityValidationError(CoachingValidationError):
    code = "invalid_availability"


def _parse_hhmm(value: Any, day: str) -> time:
    try:
        return time.fromisoformat(str(value))
    except ValueError:
        raise AvailabilityValidationError(f"Invalid time '{value}' for {day} (expected HH:MM)")


def normalize_availability(raw: dict[str, list[dict]] | None) -> dict[str, list[dict[str, str]]]:
    """
    Validate and order availability slots.

    Returns a mapping in weekday order; each slot as {"start": "HH:MM", "end": "HH:MM"}.
    Raises AvailabilityValidationError on unknown weekdays, empty or
    inverted slots and overlapping slots within one day.
    """
    if not raw:
        return {}

    result: dict[str, list[dict[str, str]]] = {}
    for day_name, slots in raw.items():
        day = str(day_name).strip().lower()
        if day not in WEEKDAYS:
            raise AvailabilityValidationError(f"Unknown weekday: {day_name}")

        parsed = []
        for slot in slots or []:
            start = _parse_hhmm(slot.get("start"), day)
            end = _parse_hhmm(slot.get("end"), day)
            if start >= end:
                raise AvailabilityValidationError(
                    f"Slot start must be before slot end on {day} ({start:%H:%M}-{end:%H:%M})"
                )
            parsed.append((start, end))

        parsed.sort()
        for (_, prev_end), (next_start, _) in zip(parsed, parsed[1:]):
            # slots are half-open: 09:00-10:00 and 10:00-11:00 do not overlap
            if next_start < prev_end:
                raise AvailabilityValidationError(f"Overlapping availability slots on {day}")

        result[day] = [{"start": f"{s:%H:%M}", "end": f"{e:%H:%M}"} for s, e in parsed]

    return {day: result[day] for day in WEEKDAYS if day in result}


def schedule_for(available_days: list[str] | None, availability: dict | None) -> dict[str, list[dict[str, str]]]:
    """
    Schedule shown for a coach: declared slots, or the default working
    window for every available day that has none.
    """
    slots = normalize_availability(availability)
    for day_name in available_days or []:
        day = str(day_name).strip().lower()
        if day in WEEKDAYS and not slots.get(day):
            slots[day] = [dict(DEFAULT_SLOT)]
    return {day: slots[day] for day in WEEKDAYS if slots.get(day)}
