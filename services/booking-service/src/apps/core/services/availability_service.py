# services/booking-service/src/apps/core/services/availability_service.py
"""
Availability Service

Slot generation and occupancy for a single business day.

`generate_day_schedule` and `mark_occupancy` are pure functions of
their inputs; `AvailabilityService` feeds them from the database.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from apps.core.models import Appointment
from .exceptions import ValidationError, SlotUnavailableError, translate_database_errors

logger = logging.getLogger(__name__)


def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def minutes_to_time(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


def parse_clock(value) -> time:
    """Parse 'HH:MM' (or pass through a time)."""
    if isinstance(value, time):
        return value
    try:
        hours, minutes = str(value).split(':')
        return time(int(hours), int(minutes))
    except ValueError:
        raise ImproperlyConfigured(f"Invalid clock time in operating rules: {value!r}")


@dataclass(frozen=True)
class OperatingRules:
    """Static business hours: open/close, slot width, closed weekdays."""

    open_time: time
    close_time: time
    slot_minutes: int
    closed_weekdays: FrozenSet[int] = frozenset()

    def __post_init__(self):
        if self.slot_minutes <= 0:
            raise ImproperlyConfigured("slot_minutes must be positive")
        if self.close_minutes <= self.open_minutes:
            raise ImproperlyConfigured("close_time must be after open_time")
        if (self.close_minutes - self.open_minutes) % self.slot_minutes:
            raise ImproperlyConfigured(
                "Opening hours must divide evenly into slots of "
                f"{self.slot_minutes} minutes"
            )
        invalid_days = [day for day in self.closed_weekdays if day not in range(7)]
        if invalid_days:
            raise ImproperlyConfigured(f"Invalid closed weekdays: {invalid_days}")

    @classmethod
    def from_settings(cls, config: Dict[str, Any] = None) -> 'OperatingRules':
        config = config if config is not None else getattr(settings, 'BOOKING_OPERATING_RULES', {})
        return cls(
            open_time=parse_clock(config.get('open_time', '08:00')),
            close_time=parse_clock(config.get('close_time', '17:00')),
            slot_minutes=int(config.get('slot_minutes', 30)),
            closed_weekdays=frozenset(int(day) for day in config.get('closed_weekdays', ())),
        )

    @property
    def open_minutes(self) -> int:
        return time_to_minutes(self.open_time)

    @property
    def close_minutes(self) -> int:
        return time_to_minutes(self.close_time)

    @property
    def slots_per_day(self) -> int:
        return (self.close_minutes - self.open_minutes) // self.slot_minutes

    def is_closed(self, day: date) -> bool:
        return day.weekday() in self.closed_weekdays


@dataclass(frozen=True)
class Occupant:
    """The minimal view of an appointment that availability needs."""

    booking_code: str
    start: time
    duration_minutes: int
    pet_name: str = ''
    service_names: Tuple[str, ...] = ()

    @classmethod
    def from_appointment(cls, appointment: Appointment) -> 'Occupant':
        return cls(
            booking_code=appointment.booking_code,
            start=appointment.time,
            duration_minutes=appointment.total_duration_minutes,
            pet_name=appointment.pet.name,
            service_names=tuple(
                line.service.name for line in appointment.service_lines.all()
            ),
        )

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes


@dataclass(frozen=True)
class TimeSlot:
    start: time
    end: time
    occupant: Optional[Occupant] = None

    @property
    def available(self) -> bool:
        return self.occupant is None

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start)


@dataclass
class DayAvailability:
    date: date
    closed: bool
    slots: List[TimeSlot] = field(default_factory=list)


def generate_day_schedule(day: date, rules: OperatingRules) -> List[TimeSlot]:
    """
    Ordered slots from open to close for `day`.

    A closed weekday yields an empty list.
    """
    if rules.is_closed(day):
        return []

    slots = []
    current = rules.open_minutes
    while current + rules.slot_minutes <= rules.close_minutes:
        slots.append(TimeSlot(
            start=minutes_to_time(current),
            end=minutes_to_time(current + rules.slot_minutes),
        ))
        current += rules.slot_minutes
    return slots


def mark_occupancy(
    slots: Iterable[TimeSlot],
    occupants: Iterable[Occupant],
) -> List[TimeSlot]:
    """
    Attach the occupying appointment to every slot it intersects.

    A slot [s, e) is occupied by [a, b) when s < b and e > a, so an
    appointment ending exactly on a slot boundary leaves that slot free.
    Cancelled appointments must already be excluded by the caller.
    """
    occupants = sorted(occupants, key=lambda o: o.start_minutes)
    marked = []
    for slot in slots:
        slot_start = slot.start_minutes
        slot_end = time_to_minutes(slot.end)
        occupant = next(
            (
                o for o in occupants
                if slot_start < o.end_minutes and slot_end > o.start_minutes
            ),
            None
        )
        marked.append(dataclasses.replace(slot, occupant=occupant))
    return marked


def slots_for_booking(
    day: date,
    start: time,
    duration_minutes: int,
    slots: List[TimeSlot],
    rules: OperatingRules,
) -> List[TimeSlot]:
    """
    Return the slots a booking of `duration_minutes` at `start` would use.

    Raises:
        ValidationError: `start` is not one of the day's slot times
        SlotUnavailableError: the day is closed, the booking would run
            past closing time, or any of its slots is taken
    """
    if not slots:
        raise SlotUnavailableError(
            day, start,
            reason=SlotUnavailableError.REASON_CLOSED,
            message=f"The spa is closed on {day:%A}s",
        )

    start_minutes = time_to_minutes(start)
    grid = {slot.start_minutes for slot in slots}
    if start.second or start.microsecond or start_minutes not in grid:
        raise ValidationError(
            f"Start time must be one of the {rules.slot_minutes}-minute slots "
            f"between {rules.open_time:%H:%M} and {rules.close_time:%H:%M}.",
            field='time'
        )

    end_minutes = start_minutes + duration_minutes
    if end_minutes > rules.close_minutes:
        raise SlotUnavailableError(
            day, start,
            reason=SlotUnavailableError.REASON_AFTER_CLOSE,
            message=(
                f"A {duration_minutes}-minute booking at {start:%H:%M} "
                f"would run past closing time ({rules.close_time:%H:%M})"
            ),
        )

    needed = [
        slot for slot in slots
        if start_minutes <= slot.start_minutes < end_minutes
    ]
    for slot in needed:
        if not slot.available:
            raise SlotUnavailableError(
                day, start,
                reason=SlotUnavailableError.REASON_OCCUPIED,
                conflicting_booking=slot.occupant.booking_code,
            )
    return needed


class AvailabilityService:
    """
    Service for day availability.

    Reads live appointments for a date and runs them through the pure
    slot functions above.
    """

    def __init__(self, rules: OperatingRules = None):
        self.rules = rules or OperatingRules.from_settings()

    def occupants_for_date(self, day: date) -> List[Occupant]:
        appointments = (
            Appointment.get_for_date(day)
            .select_related('pet')
            .prefetch_related('service_lines__service')
        )
        return [Occupant.from_appointment(a) for a in appointments]

    @translate_database_errors('availability.get_day_availability')
    def get_day_availability(self, day: date) -> DayAvailability:
        """Slots for `day` with occupancy marked."""
        if self.rules.is_closed(day):
            return DayAvailability(date=day, closed=True, slots=[])

        slots = mark_occupancy(
            generate_day_schedule(day, self.rules),
            self.occupants_for_date(day),
        )
        return DayAvailability(date=day, closed=False, slots=slots)
