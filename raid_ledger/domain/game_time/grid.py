"""
Weekly availability grid arithmetic

Two day-of-week conventions meet here:
    display: 0=Sunday ... 6=Saturday (API requests and responses)
    storage: 0=Monday ... 6=Sunday (game_time_templates rows, same as datetime.weekday())

All datetimes are naive UTC. tz_offset is minutes behind UTC (JavaScript
getTimezoneOffset), so local time = UTC - tz_offset.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Optional

HOUR = timedelta(hours=1)
DAY = timedelta(days=1)
WEEK = timedelta(days=7)

Cell = tuple[int, int]  # (dayOfWeek, hour)


def to_storage_day(display_day: int) -> int:
    """0=Sun -> 0=Mon"""
    return (display_day + 6) % 7


def to_display_day(storage_day: int) -> int:
    """0=Mon -> 0=Sun"""
    return (storage_day + 1) % 7


def iter_hours(start: datetime, end: datetime) -> Iterator[datetime]:
    """Yield every whole hour in [start, end), starting from the first hour boundary at or after start"""
    cursor = start.replace(minute=0, second=0, microsecond=0)
    if cursor < start:
        cursor += HOUR
    while cursor < end:
        yield cursor
        cursor += HOUR


def committed_storage_keys(ranges: Iterable[tuple[datetime, datetime]]) -> set[Cell]:
    """UTC (storage day, hour) cells covered by the given event ranges"""
    keys = set()
    for start, end in ranges:
        for cursor in iter_hours(start, end):
            keys.add((cursor.weekday(), cursor.hour))
    return keys


def local_cells(
    start: datetime, end: datetime, week_start: datetime, tz_offset: int = 0
) -> Iterator[Cell]:
    """
    Grid cells an event occupies within the week, in the viewer's local time.

    The range is clamped to [week_start, week_start + 7d). Each hour maps to
    (dayDiff, local hour) where dayDiff counts whole days since week_start.
    """
    week_end = week_start + WEEK
    clamped_start = max(start, week_start)
    clamped_end = min(end, week_end)
    offset = timedelta(minutes=tz_offset)

    for cursor in iter_hours(clamped_start, clamped_end):
        day_diff = (cursor - week_start) // DAY
        if 0 <= day_diff < 7:
            yield day_diff, (cursor - offset).hour


def event_day_spans(
    start: datetime, end: datetime, week_start: datetime, tz_offset: int = 0
) -> list[tuple[int, int, int]]:
    """
    Collapse an event's cells into one block per grid day.

    Returns:
        [(dayOfWeek, startHour, endHour)] with endHour exclusive (24 = end of day)
    """
    hours_by_day: dict[int, list[int]] = {}
    for day, hour in local_cells(start, end, week_start, tz_offset):
        hours_by_day.setdefault(day, []).append(hour)

    return [(day, min(hours), max(hours) + 1) for day, hours in hours_by_day.items() if hours]


def expand_dates(start: date, end: date) -> Iterator[date]:
    """Every date in the inclusive range"""
    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def compose_slots(
    template: Iterable[Cell],
    committed: set[Cell],
    week_start: datetime,
    absence_dates: Optional[set[date]] = None,
    overrides: Optional[dict[tuple[date, int], str]] = None,
) -> list[dict]:
    """
    Merge the display-convention template with the week's commitments.

    Priority per template cell: absence (blocked) > override status > committed > available.
    Committed cells outside the template are appended with fromTemplate=False.
    """
    absence_dates = absence_dates or set()
    overrides = overrides or {}
    week_date = week_start.date()

    slots = []
    template_keys = set()
    for day, hour in template:
        template_keys.add((day, hour))
        cell_date = week_date + timedelta(days=day)

        if cell_date in absence_dates:
            status = "blocked"
        elif (cell_date, hour) in overrides:
            status = overrides[(cell_date, hour)]
        elif (day, hour) in committed:
            status = "committed"
        else:
            status = "available"
        slots.append({"dayOfWeek": day, "hour": hour, "status": status, "fromTemplate": True})

    for day, hour in sorted(committed - template_keys):
        slots.append({"dayOfWeek": day, "hour": hour, "status": "committed", "fromTemplate": False})

    return slots
