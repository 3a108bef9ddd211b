"""
Working calendars and scheduling constraints.

Weekdays follow Python's date.weekday(): Monday = 0 ... Sunday = 6.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum

from planboard.logging_config import get_logger

logger = get_logger(__name__)

# Upper bound for searching the next/previous working day
MAX_SEARCH_DAYS = 365


@dataclass(frozen=True)
class CalendarHoliday:
    date: date
    name: str
    is_recurring: bool = False  # Same month/day every year

    def falls_on(self, day: date) -> bool:
        if self.is_recurring:
            return (day.month, day.day) == (self.date.month, self.date.day)
        return day == self.date


@dataclass
class WorkCalendar:
    id: str
    name: str
    working_days: frozenset[int] = frozenset({0, 1, 2, 3, 4})
    hours_per_day: float = 8
    holidays: list[CalendarHoliday] = field(default_factory=list)


DEFAULT_CALENDAR = WorkCalendar(id="default", name="Standard")


class ConstraintType(str, Enum):
    ASAP = "ASAP"  # As soon as possible
    ALAP = "ALAP"  # As late as possible
    MSO = "MSO"    # Must start on
    MFO = "MFO"    # Must finish on
    SNET = "SNET"  # Start no earlier than
    SNLT = "SNLT"  # Start no later than
    FNET = "FNET"  # Finish no earlier than
    FNLT = "FNLT"  # Finish no later than


@dataclass
class ConstraintResult:
    start_date: date
    end_date: date
    constraint_violated: bool = False
    violation_message: str | None = None


# =============================================================================
# Working Day Calculations
# =============================================================================

def is_working_day(day: date, calendar: WorkCalendar = DEFAULT_CALENDAR) -> bool:
    if day.weekday() not in calendar.working_days:
        return False
    return not any(holiday.falls_on(day) for holiday in calendar.holidays)


def _step_to_working_day(day: date, step: int, calendar: WorkCalendar) -> date:
    current = day
    for _ in range(MAX_SEARCH_DAYS):
        if is_working_day(current, calendar):
            return current
        current += timedelta(days=step)
    logger.warning(f"No working day within {MAX_SEARCH_DAYS} days of {day} in calendar {calendar.id}")
    return current


def get_next_working_day(day: date, calendar: WorkCalendar = DEFAULT_CALENDAR) -> date:
    """The given day if it is a working day, else the first one after it."""
    return _step_to_working_day(day, 1, calendar)


def get_previous_working_day(day: date, calendar: WorkCalendar = DEFAULT_CALENDAR) -> date:
    """The given day if it is a working day, else the last one before it."""
    return _step_to_working_day(day, -1, calendar)


def add_working_days(day: date, days: int, calendar: WorkCalendar = DEFAULT_CALENDAR) -> date:
    """Move `days` working days forward (or backward when negative)."""
    if days == 0:
        return day
    if not calendar.working_days:
        return day

    direction = 1 if days > 0 else -1
    remaining = abs(days)
    current = day
    while remaining > 0:
        current += timedelta(days=direction)
        if is_working_day(current, calendar):
            remaining -= 1
    return current


def get_working_days_between(
    start: date,
    end: date,
    calendar: WorkCalendar = DEFAULT_CALENDAR,
) -> int:
    """Working days in [start, end), i.e. excluding the end date."""
    count = 0
    current = start
    while current < end:
        if is_working_day(current, calendar):
            count += 1
        current += timedelta(days=1)
    return count


def calculate_end_date(
    start: date,
    duration_days: int,
    calendar: WorkCalendar = DEFAULT_CALENDAR,
) -> date:
    """
    End date of a task lasting `duration_days` working days.

    The start is first moved to a working day, which counts as day 1.
    """
    if duration_days <= 0:
        return start
    return add_working_days(get_next_working_day(start, calendar), duration_days - 1, calendar)


def get_calendar_duration(start: date, end: date) -> int:
    """Calendar days from start to end, both inclusive."""
    return (end - start).days + 1


# =============================================================================
# Constraint Helpers
# =============================================================================

def apply_constraint(
    preferred_start: date,
    duration_days: int,
    constraint_type: ConstraintType,
    constraint_date: date | None,
    calendar: WorkCalendar = DEFAULT_CALENDAR,
) -> ConstraintResult:
    """
    Place a task on the calendar, honoring one scheduling constraint.

    Hard constraints (MSO, MFO) pin the task; the "no later than" ones pull
    it back and report a violation, because the preferred start (usually
    dictated by predecessors) could not be kept. ASAP and ALAP keep the
    preferred start; ALAP needs a backward pass this helper does not run.
    """
    span = max(duration_days, 1) - 1
    start = get_next_working_day(preferred_start, calendar)
    end = calculate_end_date(start, duration_days, calendar)

    if constraint_date is None or constraint_type in (ConstraintType.ASAP, ConstraintType.ALAP):
        return ConstraintResult(start, end)

    if constraint_type is ConstraintType.MSO:
        start = get_next_working_day(constraint_date, calendar)
        end = calculate_end_date(start, duration_days, calendar)
        if start != constraint_date:
            return ConstraintResult(
                start, end, True, f"Task must start on {constraint_date.isoformat()}"
            )

    elif constraint_type is ConstraintType.MFO:
        end = get_previous_working_day(constraint_date, calendar)
        start = add_working_days(end, -span, calendar)
        if end != constraint_date:
            return ConstraintResult(
                start, end, True, f"Task must finish on {constraint_date.isoformat()}"
            )

    elif constraint_type is ConstraintType.SNET:
        if start < constraint_date:
            start = get_next_working_day(constraint_date, calendar)
            end = calculate_end_date(start, duration_days, calendar)

    elif constraint_type is ConstraintType.SNLT:
        if start > constraint_date:
            start = get_previous_working_day(constraint_date, calendar)
            end = calculate_end_date(start, duration_days, calendar)
            return ConstraintResult(
                start, end, True,
                f"Task must start no later than {constraint_date.isoformat()}",
            )

    elif constraint_type is ConstraintType.FNET:
        if end < constraint_date:
            end = get_next_working_day(constraint_date, calendar)
            start = add_working_days(end, -span, calendar)

    elif constraint_type is ConstraintType.FNLT:
        if end > constraint_date:
            end = get_previous_working_day(constraint_date, calendar)
            start = add_working_days(end, -span, calendar)
            return ConstraintResult(
                start, end, True,
                f"Task must finish no later than {constraint_date.isoformat()}",
            )

    return ConstraintResult(start, end)


def get_dutch_holidays(year: int) -> list[CalendarHoliday]:
    """Fixed-date Dutch public holidays (movable feasts are not included)."""
    return [
        CalendarHoliday(date(year, 1, 1), "Nieuwjaarsdag", True),
        CalendarHoliday(date(year, 4, 27), "Koningsdag", True),
        CalendarHoliday(date(year, 5, 5), "Bevrijdingsdag", True),
        CalendarHoliday(date(year, 12, 25), "Eerste Kerstdag", True),
        CalendarHoliday(date(year, 12, 26), "Tweede Kerstdag", True),
    ]
