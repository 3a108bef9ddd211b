"""
Tests for working calendars and scheduling constraints.

2024-01-01 is a Monday; 2024-01-06/07 is the first weekend.
"""

from datetime import date

import pytest

from planboard.services.calendars import (
    CalendarHoliday,
    ConstraintType,
    WorkCalendar,
    add_working_days,
    apply_constraint,
    calculate_end_date,
    get_calendar_duration,
    get_dutch_holidays,
    get_next_working_day,
    get_previous_working_day,
    get_working_days_between,
    is_working_day,
)

MONDAY = date(2024, 1, 1)
FRIDAY = date(2024, 1, 5)
SATURDAY = date(2024, 1, 6)
SUNDAY = date(2024, 1, 7)
NEXT_MONDAY = date(2024, 1, 8)


class TestWorkingDays:

    def test_weekends_are_off(self):
        assert is_working_day(MONDAY)
        assert is_working_day(FRIDAY)
        assert not is_working_day(SATURDAY)
        assert not is_working_day(SUNDAY)

    def test_recurring_holiday_matches_every_year(self):
        calendar = WorkCalendar(id="nl", name="NL", holidays=get_dutch_holidays(2023))

        assert not is_working_day(date(2024, 1, 1), calendar)
        assert not is_working_day(date(2025, 12, 25), calendar)
        assert is_working_day(date(2024, 1, 2), calendar)

    def test_one_off_holiday(self):
        holiday = CalendarHoliday(date(2024, 1, 3), "Company day")
        calendar = WorkCalendar(id="c", name="C", holidays=[holiday])

        assert not is_working_day(date(2024, 1, 3), calendar)
        assert is_working_day(date(2025, 1, 3), calendar)

    def test_next_and_previous_working_day(self):
        assert get_next_working_day(SATURDAY) == NEXT_MONDAY
        assert get_previous_working_day(SUNDAY) == FRIDAY
        assert get_next_working_day(MONDAY) == MONDAY

    def test_add_working_days_skips_weekend(self):
        assert add_working_days(FRIDAY, 1) == NEXT_MONDAY
        assert add_working_days(NEXT_MONDAY, -1) == FRIDAY
        assert add_working_days(MONDAY, 0) == MONDAY

    def test_working_days_between_excludes_end(self):
        assert get_working_days_between(MONDAY, NEXT_MONDAY) == 5
        assert get_working_days_between(MONDAY, MONDAY) == 0

    def test_end_date_counts_start_as_day_one(self):
        assert calculate_end_date(MONDAY, 5) == FRIDAY
        assert calculate_end_date(FRIDAY, 2) == NEXT_MONDAY
        # A weekend start moves to Monday first
        assert calculate_end_date(SATURDAY, 1) == NEXT_MONDAY
        assert calculate_end_date(MONDAY, 0) == MONDAY

    def test_calendar_duration_is_inclusive(self):
        assert get_calendar_duration(MONDAY, SUNDAY) == 7


class TestConstraints:

    @pytest.mark.parametrize("constraint_type", [ConstraintType.ASAP, ConstraintType.ALAP])
    def test_soft_constraints_keep_preferred_start(self, constraint_type):
        result = apply_constraint(MONDAY, 3, constraint_type, date(2024, 2, 1))

        assert (result.start_date, result.end_date) == (MONDAY, date(2024, 1, 3))
        assert result.constraint_violated is False

    def test_missing_constraint_date_is_ignored(self):
        result = apply_constraint(MONDAY, 3, ConstraintType.MSO, None)
        assert result.start_date == MONDAY

    def test_must_start_on(self):
        result = apply_constraint(MONDAY, 3, ConstraintType.MSO, date(2024, 1, 10))

        assert (result.start_date, result.end_date) == (date(2024, 1, 10), date(2024, 1, 12))
        assert result.constraint_violated is False

    def test_must_start_on_weekend_is_violated(self):
        result = apply_constraint(MONDAY, 1, ConstraintType.MSO, SATURDAY)

        assert result.start_date == NEXT_MONDAY
        assert result.constraint_violated is True
        assert "2024-01-06" in result.violation_message

    def test_must_finish_on(self):
        result = apply_constraint(MONDAY, 3, ConstraintType.MFO, NEXT_MONDAY)

        assert (result.start_date, result.end_date) == (date(2024, 1, 4), NEXT_MONDAY)
        assert result.constraint_violated is False

    def test_start_no_earlier_than(self):
        pushed = apply_constraint(MONDAY, 2, ConstraintType.SNET, date(2024, 1, 4))
        kept = apply_constraint(date(2024, 1, 10), 2, ConstraintType.SNET, date(2024, 1, 4))

        assert (pushed.start_date, pushed.end_date) == (date(2024, 1, 4), FRIDAY)
        assert kept.start_date == date(2024, 1, 10)
        assert not pushed.constraint_violated and not kept.constraint_violated

    def test_start_no_later_than_is_violated_when_pulled_back(self):
        result = apply_constraint(date(2024, 1, 10), 2, ConstraintType.SNLT, SUNDAY)

        assert result.start_date == FRIDAY
        assert result.end_date == NEXT_MONDAY
        assert result.constraint_violated is True

    def test_finish_no_earlier_than_shifts_task(self):
        result = apply_constraint(MONDAY, 2, ConstraintType.FNET, date(2024, 1, 9))

        assert (result.start_date, result.end_date) == (NEXT_MONDAY, date(2024, 1, 9))
        assert result.constraint_violated is False

    def test_finish_no_later_than(self):
        result = apply_constraint(NEXT_MONDAY, 3, ConstraintType.FNLT, date(2024, 1, 9))

        assert (result.start_date, result.end_date) == (FRIDAY, date(2024, 1, 9))
        assert result.constraint_violated is True

    def test_finish_no_later_than_already_met(self):
        result = apply_constraint(MONDAY, 3, ConstraintType.FNLT, date(2024, 1, 9))

        assert result.end_date == date(2024, 1, 3)
        assert result.constraint_violated is False
