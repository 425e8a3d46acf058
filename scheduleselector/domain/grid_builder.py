"""
Builds the day-by-time grid of selectable slots from a compact configuration.
"""

from datetime import date, datetime
from typing import List, Union

import pendulum
from pendulum import DateTime

from .exceptions import ConfigError
from .models import Grid, TimeSlot

MINUTES_PER_HOUR = 60


def build_grid(
    start_date: Union[date, datetime, str],
    num_days: int,
    min_time: int,
    max_time: int,
    hourly_chunks: int,
    timezone: str = "UTC",
) -> Grid:
    """
    Generate the grid of slots for ``num_days`` days starting at ``start_date``.

    Each day holds ``(max_time - min_time) * hourly_chunks`` slots, starting at
    ``min_time:00`` and spaced ``60 // hourly_chunks`` minutes apart. Only the
    calendar date of ``start_date`` is used.

    Args:
        start_date: Day 0 of the grid (date, datetime or ISO 8601 string)
        num_days: Number of day columns, at least 1
        min_time: First hour of each day (0-23)
        max_time: Hour at which each day stops (1-24, after ``min_time``)
        hourly_chunks: Slots per hour (1-60)
        timezone: Timezone for dates without an explicit offset

    Returns:
        Grid with ``num_days`` columns

    Raises:
        ConfigError: If any parameter is out of range
    """
    _validate(num_days, min_time, max_time, hourly_chunks)

    first_day = _start_of_day(start_date, timezone)
    minutes_in_chunk = MINUTES_PER_HOUR // hourly_chunks

    columns: List[List[TimeSlot]] = []
    for day_offset in range(num_days):
        day = first_day.add(days=day_offset)
        column = [
            _wall_clock_slot(day, hour, chunk * minutes_in_chunk)
            for hour in range(min_time, max_time)
            for chunk in range(hourly_chunks)
        ]
        columns.append(column)

    return Grid(columns=columns)


def _validate(num_days: int, min_time: int, max_time: int, hourly_chunks: int) -> None:
    if num_days < 1:
        raise ConfigError(f"num_days must be at least 1, got {num_days}")
    if hourly_chunks < 1:
        raise ConfigError(f"hourly_chunks must be at least 1, got {hourly_chunks}")
    # More than one slot per minute would collapse into duplicate slots
    if hourly_chunks > MINUTES_PER_HOUR:
        raise ConfigError(f"hourly_chunks must be at most 60, got {hourly_chunks}")
    if not 0 <= min_time <= 24 or not 0 <= max_time <= 24:
        raise ConfigError(
            f"min_time and max_time must be hours between 0 and 24, got {min_time} and {max_time}"
        )
    if min_time >= max_time:
        raise ConfigError(f"min_time ({min_time}) must be before max_time ({max_time})")


def _start_of_day(value: Union[date, datetime, str], timezone: str) -> DateTime:
    """Truncate any supported date value to midnight of its calendar day."""
    if isinstance(value, str):
        try:
            value = pendulum.parse(value, tz=timezone)
        except ValueError as exc:
            raise ConfigError(f"Invalid start date '{value}': {exc}") from exc

    if isinstance(value, datetime):
        return pendulum.instance(value, tz=timezone).start_of("day")

    if isinstance(value, date):
        return pendulum.datetime(value.year, value.month, value.day, tz=timezone)

    raise ConfigError(f"Unsupported start date: {value!r}")


def _wall_clock_slot(day: DateTime, hour: int, minute: int) -> TimeSlot:
    """
    Slot at ``hour:minute`` local time on ``day``.

    Times are set on the calendar day rather than added as elapsed time, so
    every row keeps the same wall-clock time on days with a DST change.

    Raises:
        ConfigError: If the local time is skipped by a DST change
    """
    start = day.set(hour=hour, minute=minute, second=0, microsecond=0)
    if (start.hour, start.minute) != (hour, minute):
        raise ConfigError(
            f"{hour:02d}:{minute:02d} does not exist on {day.format('YYYY-MM-DD')} "
            f"in {day.timezone_name} (DST change); move min_time past the gap"
        )
    return TimeSlot(start)
