"""
tests/calendar/test_calendar.py

Covers:
  - Raw day-flag storage and the None substitution rule
  - Exception overrides in is_working_date (first match wins)
  - Calendar hours slots, replacement and bounds
  - Default calendar hours
  - The 250-exception cap on every add path
  - Building from record fields
  - MPX rendering and repr
"""

from datetime import date, datetime, time

import numpy as np
import pytest

from mpxkit.calendar import (
    MAX_CALENDAR_EXCEPTIONS,
    CalendarDefinition,
    CalendarKind,
    CalendarRegistry,
    Day,
    DayFlag,
    FileContext,
    MaximumRecordsExceeded,
)


MONDAY = date(2024, 1, 1)
WEDNESDAY = date(2024, 1, 3)
SATURDAY = date(2024, 1, 6)
SUNDAY = date(2024, 1, 7)


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def registry():
    return CalendarRegistry()


@pytest.fixture
def standard(registry):
    """Mon–Fri base calendar named 'Standard'."""
    return registry.add_default_base_calendar()


@pytest.fixture
def base():
    return CalendarDefinition(CalendarKind.BASE, "Base")


@pytest.fixture
def derived():
    return CalendarDefinition(CalendarKind.DERIVED, "Standard")


# ── Day flags ─────────────────────────────────────────────────────────────────

class TestDayFlags:

    @pytest.mark.parametrize("day", list(Day))
    @pytest.mark.parametrize("flag", list(DayFlag))
    def test_raw_round_trip(self, base, day, flag):
        base.set_working_day(day, flag)
        assert base.get_working_day(day) is flag

    @pytest.mark.parametrize("raw, expected", [
        (0, DayFlag.NON_WORKING),
        (1, DayFlag.WORKING),
        (2, DayFlag.DEFAULT),
    ])
    def test_raw_integer_values(self, base, raw, expected):
        base.set_working_day(Day.MONDAY, raw)
        assert base.get_working_day(Day.MONDAY) is expected

    def test_bool_maps_to_working_and_non_working(self, base):
        base.set_working_day(Day.MONDAY, True)
        base.set_working_day(Day.TUESDAY, False)
        assert base.get_working_day(Day.MONDAY) is DayFlag.WORKING
        assert base.get_working_day(Day.TUESDAY) is DayFlag.NON_WORKING

    def test_none_on_base_calendar_is_working(self, base):
        base.set_working_day(Day.MONDAY, False)
        base.set_working_day(Day.MONDAY, None)
        assert base.get_working_day(Day.MONDAY) is DayFlag.WORKING

    def test_none_on_derived_calendar_is_default(self, derived):
        derived.set_working_day(Day.MONDAY, True)
        derived.set_working_day(Day.MONDAY, None)
        assert derived.get_working_day(Day.MONDAY) is DayFlag.DEFAULT

    def test_new_base_calendar_is_all_working(self, base):
        assert base.days == (DayFlag.WORKING,) * 7

    def test_new_derived_calendar_is_all_default(self, derived):
        assert derived.days == (DayFlag.DEFAULT,) * 7

    def test_invalid_flag_value_raises(self, base):
        with pytest.raises(ValueError):
            base.set_working_day(Day.MONDAY, 5)

    @pytest.mark.parametrize("day", [0, 8])
    def test_day_out_of_range_raises(self, base, day):
        with pytest.raises(ValueError):
            base.set_working_day(day, True)

    def test_explicit_flags_resolve_without_registry(self, base):
        base.set_working_day(Day.SUNDAY, False)
        assert base.is_working_day(Day.MONDAY) is True
        assert base.is_working_day(Day.SUNDAY) is False

    def test_kind_is_fixed(self, base, derived):
        assert base.is_base_calendar
        assert not derived.is_base_calendar
        assert base.name == "Base" and base.base_calendar_name is None
        assert derived.base_calendar_name == "Standard" and derived.name is None

    def test_derived_name_cannot_be_set(self, derived):
        with pytest.raises(ValueError):
            derived.name = "Night"
        assert derived.name is None
        assert derived.label == "Standard"

    def test_base_link_is_not_rendered(self, base):
        base.base_calendar_name = "Standard"
        assert base.label == "Base"
        assert base.to_mpx().startswith("20,Base,")


# ── Working dates ─────────────────────────────────────────────────────────────

class TestWorkingDates:

    def test_weekday_and_weekend(self, standard):
        assert standard.is_working_date(MONDAY)
        assert not standard.is_working_date(SATURDAY)
        assert not standard.is_working_date(SUNDAY)

    def test_datetime_is_checked_by_its_date(self, standard):
        assert standard.is_working_date(datetime(2024, 1, 1, 23, 59))

    def test_non_working_exception_on_working_day(self, standard):
        standard.add_calendar_exception(WEDNESDAY, WEDNESDAY, working=False)
        assert not standard.is_working_date(WEDNESDAY)
        assert standard.is_working_date(date(2024, 1, 4))

    def test_working_exception_on_non_working_day(self, standard):
        standard.add_calendar_exception(SATURDAY, SATURDAY, working=True)
        assert standard.is_working_date(SATURDAY)
        assert not standard.is_working_date(SUNDAY)

    def test_first_matching_exception_wins(self, standard):
        standard.add_calendar_exception(date(2024, 1, 8), date(2024, 1, 12), working=False)
        standard.add_calendar_exception(date(2024, 1, 10), date(2024, 1, 10), working=True)
        assert not standard.is_working_date(date(2024, 1, 10))

    def test_exception_range_is_inclusive(self, standard):
        standard.add_calendar_exception(date(2024, 1, 8), date(2024, 1, 9), working=False)
        assert standard.is_working_date(date(2024, 1, 5))
        assert not standard.is_working_date(date(2024, 1, 8))
        assert not standard.is_working_date(date(2024, 1, 9))
        assert standard.is_working_date(date(2024, 1, 10))

    def test_mask_matches_scalar_resolution(self, standard):
        standard.add_calendar_exception(date(2024, 1, 8), date(2024, 1, 12), working=False)
        standard.add_calendar_exception(date(2024, 1, 10), date(2024, 1, 10), working=True)
        standard.add_calendar_exception(date(2024, 1, 13), date(2024, 1, 13), working=True)
        days = np.arange("2023-12-20", "2024-02-20", dtype="datetime64[D]")
        expected = [standard.is_working_date(d.item()) for d in days]
        np.testing.assert_array_equal(standard.working_mask(days), expected)

    def test_mask_accepts_dates_and_preserves_shape(self, standard):
        mask = standard.working_mask([[MONDAY, SATURDAY], [SUNDAY, WEDNESDAY]])
        assert mask.shape == (2, 2)
        np.testing.assert_array_equal(mask, [[True, False], [False, True]])


# ── Calendar hours ────────────────────────────────────────────────────────────

class TestCalendarHours:

    def test_add_and_get(self, base):
        hours = base.add_calendar_hours(Day.MONDAY)
        assert base.get_calendar_hours(Day.MONDAY) is hours
        assert hours.day == Day.MONDAY
        assert hours.ranges == ()

    def test_unset_slot_is_none(self, base):
        assert base.get_calendar_hours(Day.TUESDAY) is None

    @pytest.mark.parametrize("day", [0, 8])
    def test_get_day_out_of_range_raises(self, base, day):
        with pytest.raises(ValueError):
            base.get_calendar_hours(day)

    def test_second_add_replaces_first(self, base):
        first = base.add_calendar_hours(Day.MONDAY)
        first.add_range(time(9), time(10))
        second = base.add_calendar_hours(Day.MONDAY)
        assert base.get_calendar_hours(Day.MONDAY) is second
        assert len(base.calendar_hours) == 1

    @pytest.mark.parametrize("day", [0, 8, -1])
    def test_day_out_of_range_raises(self, base, day):
        with pytest.raises(MaximumRecordsExceeded):
            base.add_calendar_hours(day)

    def test_record_day_out_of_range_raises(self, base):
        with pytest.raises(MaximumRecordsExceeded):
            base.add_calendar_hours_record(["9", "08:00", "12:00"])

    def test_record_path(self, base):
        hours = base.add_calendar_hours_record(["2", "08:00", "12:00", "13:00", "17:00"])
        assert base.get_calendar_hours(Day.MONDAY) is hours
        assert hours.ranges == ((time(8), time(12)), (time(13), time(17)))

    def test_hours_do_not_affect_working_state(self, base):
        base.set_working_day(Day.SUNDAY, False)
        base.add_calendar_hours(Day.SUNDAY).add_range(time(8), time(12))
        assert not base.is_working_day(Day.SUNDAY)


class TestDefaultCalendarHours:

    def test_weekdays_have_two_ranges(self, base):
        base.add_default_calendar_hours()
        for day in (Day.MONDAY, Day.TUESDAY, Day.WEDNESDAY, Day.THURSDAY, Day.FRIDAY):
            assert base.get_calendar_hours(day).ranges == (
                (time(8, 0), time(12, 0)),
                (time(13, 0), time(17, 0)),
            )

    def test_weekend_entries_are_empty(self, base):
        base.add_default_calendar_hours()
        assert base.get_calendar_hours(Day.SATURDAY).ranges == ()
        assert base.get_calendar_hours(Day.SUNDAY).ranges == ()

    def test_all_seven_slots_filled(self, base):
        base.add_default_calendar_hours()
        assert [h.day for h in base.calendar_hours] == list(range(1, 8))

    def test_flags_are_untouched(self, base):
        base.add_default_calendar_hours()
        assert base.get_working_day(Day.SATURDAY) is DayFlag.WORKING


# ── Exception cap ─────────────────────────────────────────────────────────────

class TestExceptionCap:

    def _fill(self, cal):
        for i in range(MAX_CALENDAR_EXCEPTIONS):
            cal.add_calendar_exception(date(2030, 1, 1), date(2030, 1, 1))

    def test_250_exceptions_allowed(self, base):
        self._fill(base)
        assert len(base.calendar_exceptions) == MAX_CALENDAR_EXCEPTIONS

    def test_251st_exception_raises(self, base):
        self._fill(base)
        with pytest.raises(MaximumRecordsExceeded) as info:
            base.add_calendar_exception(date(2030, 1, 2), date(2030, 1, 2))
        assert info.value.limit == MAX_CALENDAR_EXCEPTIONS
        assert len(base.calendar_exceptions) == MAX_CALENDAR_EXCEPTIONS

    def test_251st_record_exception_raises(self, base):
        self._fill(base)
        with pytest.raises(MaximumRecordsExceeded):
            base.add_calendar_exception_record(["02/01/2030", "02/01/2030", "0"])

    def test_insertion_order_kept(self, base):
        a = base.add_calendar_exception(date(2030, 1, 5), date(2030, 1, 5))
        b = base.add_calendar_exception(date(2030, 1, 1), date(2030, 1, 1))
        assert base.calendar_exceptions == (a, b)


# ── Records ───────────────────────────────────────────────────────────────────

class TestFromRecord:

    def test_base_record(self):
        cal = CalendarDefinition.from_record(
            ["Standard", "0", "1", "1", "1", "1", "1", "0"], CalendarKind.BASE
        )
        assert cal.name == "Standard"
        assert cal.get_working_day(Day.SUNDAY) is DayFlag.NON_WORKING
        assert cal.get_working_day(Day.MONDAY) is DayFlag.WORKING

    def test_derived_record(self):
        cal = CalendarDefinition.from_record(
            ["Standard", "2", "2", "0", "2", "2", "2", "1"], CalendarKind.DERIVED
        )
        assert cal.base_calendar_name == "Standard"
        assert cal.get_working_day(Day.TUESDAY) is DayFlag.NON_WORKING
        assert cal.get_working_day(Day.SATURDAY) is DayFlag.WORKING
        assert cal.get_working_day(Day.SUNDAY) is DayFlag.DEFAULT

    def test_blank_fields_follow_substitution(self):
        base = CalendarDefinition.from_record(["Night", "", "0"], CalendarKind.BASE)
        derived = CalendarDefinition.from_record(["Night", "", "0"], CalendarKind.DERIVED)
        assert base.get_working_day(Day.SUNDAY) is DayFlag.WORKING
        assert base.get_working_day(Day.SATURDAY) is DayFlag.WORKING
        assert derived.get_working_day(Day.SUNDAY) is DayFlag.DEFAULT
        assert derived.get_working_day(Day.MONDAY) is DayFlag.NON_WORKING

    def test_registry_record_is_registered(self, registry):
        cal = registry.add_calendar_record(["Night", "1", "1", "1", "1", "1", "1", "1"], CalendarKind.BASE)
        assert registry.get_base_calendar("Night") is cal


# ── Rendering ─────────────────────────────────────────────────────────────────

class TestRendering:

    def test_base_calendar_with_hours_and_exception(self, standard):
        standard.add_calendar_exception(WEDNESDAY, WEDNESDAY, working=False)
        assert str(standard) == (
            "20,Standard,0,1,1,1,1,1,0\r\n"
            "25,1\r\n"
            "25,2,08:00,12:00,13:00,17:00\r\n"
            "25,3,08:00,12:00,13:00,17:00\r\n"
            "25,4,08:00,12:00,13:00,17:00\r\n"
            "25,5,08:00,12:00,13:00,17:00\r\n"
            "25,6,08:00,12:00,13:00,17:00\r\n"
            "25,7\r\n"
            "26,03/01/2024,03/01/2024,0\r\n"
        )

    def test_derived_calendar(self, registry):
        cal = registry.add_derived_calendar("Standard")
        cal.set_working_day(Day.SATURDAY, True)
        cal.add_calendar_hours(Day.SATURDAY).add_range(time(9), time(13))
        cal.add_calendar_exception(SUNDAY, SUNDAY, working=True)
        assert cal.to_mpx() == (
            "55,Standard,2,2,2,2,2,2,1\r\n"
            "56,7,09:00,13:00\r\n"
            "57,07/01/2024,07/01/2024,1\r\n"
        )

    def test_registry_delimiter_is_used(self):
        registry = CalendarRegistry(FileContext(delimiter=";"))
        cal = registry.add_base_calendar("Night")
        assert cal.to_mpx() == "20;Night;1;1;1;1;1;1;1\r\n"

    def test_explicit_context_overrides_registry(self, standard):
        text = standard.to_mpx(FileContext(delimiter="\t"))
        assert text.startswith("20\tStandard\t0\t1")

    def test_unnamed_calendar_renders_empty_field(self, base):
        base.name = None
        assert base.to_mpx().startswith("20,,1")

    def test_repr(self, standard):
        r = repr(standard)
        assert "CalendarDefinition(kind='base'" in r
        assert "label='Standard'" in r
        assert "days='0111110'" in r
        assert "hours=7" in r
