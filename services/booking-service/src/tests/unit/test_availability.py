# services/booking-service/src/tests/unit/test_availability.py
"""
Unit Tests for Slot Generation and Occupancy

These exercise the pure availability functions; no database needed.
"""

from datetime import date, time

import pytest
from django.core.exceptions import ImproperlyConfigured

from apps.core.services import (
    Occupant,
    OperatingRules,
    SlotUnavailableError,
    ValidationError,
    generate_day_schedule,
    mark_occupancy,
    slots_for_booking,
)
from apps.core.services.availability_service import (
    minutes_to_time,
    parse_clock,
    time_to_minutes,
)


TUESDAY = date(2025, 3, 4)
SUNDAY = date(2025, 3, 2)
MONDAY = date(2025, 3, 3)


@pytest.fixture
def rules():
    return OperatingRules(
        open_time=time(8, 0),
        close_time=time(17, 0),
        slot_minutes=30,
        closed_weekdays=frozenset({6, 0}),
    )


def occupant(code, start, minutes, pet='Biscuit'):
    return Occupant(
        booking_code=code,
        start=start,
        duration_minutes=minutes,
        pet_name=pet,
        service_names=('Bath Time Bliss',),
    )


def marked(day, rules, *occupants):
    return mark_occupancy(generate_day_schedule(day, rules), occupants)


class TestClockHelpers:
    """Tests for minute arithmetic helpers."""

    @pytest.mark.parametrize('value,minutes', [
        (time(0, 0), 0),
        (time(8, 0), 480),
        (time(9, 30), 570),
        (time(17, 0), 1020),
    ])
    def test_time_to_minutes(self, value, minutes):
        assert time_to_minutes(value) == minutes
        assert minutes_to_time(minutes) == value

    def test_parse_clock(self):
        assert parse_clock('08:30') == time(8, 30)
        assert parse_clock(time(9, 0)) == time(9, 0)

    def test_parse_clock_invalid(self):
        with pytest.raises(ImproperlyConfigured):
            parse_clock('eight')


class TestOperatingRules:
    """Tests for operating rule validation."""

    def test_from_settings_defaults(self):
        rules = OperatingRules.from_settings({})

        assert rules.open_time == time(8, 0)
        assert rules.close_time == time(17, 0)
        assert rules.slot_minutes == 30
        assert rules.closed_weekdays == frozenset()

    def test_from_settings_mapping(self):
        rules = OperatingRules.from_settings({
            'open_time': '09:00',
            'close_time': '15:00',
            'slot_minutes': 15,
            'closed_weekdays': ['6'],
        })

        assert rules.open_time == time(9, 0)
        assert rules.slots_per_day == 24
        assert rules.is_closed(SUNDAY)
        assert not rules.is_closed(MONDAY)

    @pytest.mark.parametrize('kwargs', [
        {'slot_minutes': 0},
        {'close_time': time(8, 0)},
        {'close_time': time(16, 45)},
        {'closed_weekdays': frozenset({7})},
    ])
    def test_invalid_rules_rejected(self, kwargs):
        params = {
            'open_time': time(8, 0),
            'close_time': time(17, 0),
            'slot_minutes': 30,
        }
        params.update(kwargs)

        with pytest.raises(ImproperlyConfigured):
            OperatingRules(**params)


class TestGenerateDaySchedule:
    """Tests for the day slot grid."""

    def test_open_day(self, rules):
        slots = generate_day_schedule(TUESDAY, rules)

        assert len(slots) == 18
        assert slots[0].start == time(8, 0)
        assert slots[0].end == time(8, 30)
        assert slots[-1].start == time(16, 30)
        assert slots[-1].end == time(17, 0)
        assert all(slot.available for slot in slots)

    def test_slots_are_contiguous(self, rules):
        slots = generate_day_schedule(TUESDAY, rules)

        for previous, current in zip(slots, slots[1:]):
            assert previous.end == current.start

    @pytest.mark.parametrize('day', [SUNDAY, MONDAY])
    def test_closed_day_has_no_slots(self, rules, day):
        assert generate_day_schedule(day, rules) == []


class TestMarkOccupancy:
    """Tests for attaching appointments to slots."""

    def test_sixty_minute_booking_occupies_two_slots(self, rules):
        slots = marked(TUESDAY, rules, occupant('PS-A', time(9, 0), 60))
        taken = [slot.start for slot in slots if not slot.available]

        assert taken == [time(9, 0), time(9, 30)]

    def test_partial_slot_is_occupied(self, rules):
        slots = marked(TUESDAY, rules, occupant('PS-A', time(9, 0), 45))
        taken = [slot.start for slot in slots if not slot.available]

        assert taken == [time(9, 0), time(9, 30)]

    def test_boundary_end_leaves_next_slot_free(self, rules):
        slots = marked(TUESDAY, rules, occupant('PS-A', time(9, 0), 30))
        by_start = {slot.start: slot for slot in slots}

        assert not by_start[time(9, 0)].available
        assert by_start[time(9, 30)].available
        assert by_start[time(8, 30)].available

    def test_occupant_details_attached(self, rules):
        slots = marked(TUESDAY, rules, occupant('PS-A', time(8, 0), 30, pet='Mochi'))

        assert slots[0].occupant.booking_code == 'PS-A'
        assert slots[0].occupant.pet_name == 'Mochi'
        assert slots[0].occupant.service_names == ('Bath Time Bliss',)

    def test_several_occupants(self, rules):
        slots = marked(
            TUESDAY, rules,
            occupant('PS-B', time(14, 0), 120),
            occupant('PS-A', time(8, 0), 30),
        )
        codes = {slot.start: slot.occupant.booking_code for slot in slots if slot.occupant}

        assert codes == {
            time(8, 0): 'PS-A',
            time(14, 0): 'PS-B',
            time(14, 30): 'PS-B',
            time(15, 0): 'PS-B',
            time(15, 30): 'PS-B',
        }

    def test_input_slots_unchanged(self, rules):
        slots = generate_day_schedule(TUESDAY, rules)
        mark_occupancy(slots, [occupant('PS-A', time(8, 0), 30)])

        assert all(slot.available for slot in slots)


class TestSlotsForBooking:
    """Tests for checking a requested start time."""

    def test_free_slots_returned(self, rules):
        slots = marked(TUESDAY, rules)
        needed = slots_for_booking(TUESDAY, time(9, 0), 60, slots, rules)

        assert [slot.start for slot in needed] == [time(9, 0), time(9, 30)]

    def test_overlapping_request_rejected(self, rules):
        slots = marked(TUESDAY, rules, occupant('PS-A', time(9, 0), 60))

        with pytest.raises(SlotUnavailableError) as exc_info:
            slots_for_booking(TUESDAY, time(9, 30), 30, slots, rules)

        assert exc_info.value.reason == SlotUnavailableError.REASON_OCCUPIED
        assert exc_info.value.conflicting_booking == 'PS-A'

    def test_request_running_into_booking_rejected(self, rules):
        slots = marked(TUESDAY, rules, occupant('PS-A', time(10, 0), 30))

        with pytest.raises(SlotUnavailableError):
            slots_for_booking(TUESDAY, time(9, 0), 90, slots, rules)

    def test_request_after_booking_accepted(self, rules):
        slots = marked(TUESDAY, rules, occupant('PS-A', time(9, 0), 60))

        needed = slots_for_booking(TUESDAY, time(10, 0), 30, slots, rules)

        assert [slot.start for slot in needed] == [time(10, 0)]

    def test_closed_day(self, rules):
        with pytest.raises(SlotUnavailableError) as exc_info:
            slots_for_booking(SUNDAY, time(9, 0), 30, marked(SUNDAY, rules), rules)

        assert exc_info.value.reason == SlotUnavailableError.REASON_CLOSED

    @pytest.mark.parametrize('start', [time(9, 15), time(7, 30), time(17, 0), time(9, 0, 30)])
    def test_off_grid_start(self, rules, start):
        with pytest.raises(ValidationError) as exc_info:
            slots_for_booking(TUESDAY, start, 30, marked(TUESDAY, rules), rules)

        assert 'time' in exc_info.value.field_errors

    def test_runs_past_closing(self, rules):
        with pytest.raises(SlotUnavailableError) as exc_info:
            slots_for_booking(TUESDAY, time(16, 30), 60, marked(TUESDAY, rules), rules)

        assert exc_info.value.reason == SlotUnavailableError.REASON_AFTER_CLOSE

    def test_last_slot_fits_exactly(self, rules):
        needed = slots_for_booking(TUESDAY, time(16, 30), 30, marked(TUESDAY, rules), rules)

        assert len(needed) == 1
