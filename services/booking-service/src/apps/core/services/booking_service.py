# services/booking-service/src/apps/core/services/booking_service.py
"""
Booking Service

Turns a booking request into a durable appointment.
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from typing import Optional, Dict, Any, List, Tuple

from django.conf import settings
from django.db import transaction, IntegrityError
from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.core.events import EventPublisher, EventType
from apps.core.models import (
    Appointment,
    AppointmentService,
    CalendarDay,
    Customer,
    Pet,
    Service,
)
from shared.common.utils import BASE36_ALPHABET, to_base36, mask_email
from .availability_service import (
    AvailabilityService,
    generate_day_schedule,
    mark_occupancy,
    slots_for_booking,
)
from .catalog_service import CatalogService
from .exceptions import (
    ValidationError,
    SlotUnavailableError,
    NotFoundError,
    StorageError,
    translate_database_errors,
)
from .party_service import PartyService

logger = logging.getLogger(__name__)


# ==============================================================================
# Request / result values
# ==============================================================================

@dataclass
class ServiceSelection:
    code: str
    quantity: int = 1


@dataclass
class PetDetails:
    name: str
    breed: str
    size: Optional[str] = None
    notes: str = ''


@dataclass
class OwnerDetails:
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str = ''
    emergency_contact: str = ''


@dataclass
class Preferences:
    """Carried through to notifications; the booking core does not read them."""

    marketing_consent: bool = False
    contact_method: Optional[str] = None
    reminder_preference: Optional[str] = None


@dataclass
class BookingRequest:
    services: List[ServiceSelection]
    date: date
    time: time
    pet: PetDetails
    owner: OwnerDetails
    preferences: Preferences = field(default_factory=Preferences)
    notes: str = ''


@dataclass
class BookingResult:
    booking_code: str
    appointment: Appointment


def generate_booking_code(prefix: str = None) -> str:
    """`<prefix>-<base36 millisecond timestamp><4 random base36 chars>`"""
    prefix = prefix or getattr(settings, 'BOOKING_CODE_PREFIX', 'PS')
    stamp = to_base36(int(timezone.now().timestamp() * 1000))
    suffix = ''.join(secrets.choice(BASE36_ALPHABET) for _ in range(4))
    return f"{prefix}-{stamp}{suffix}"


def appointment_search_q(value: str) -> Q:
    """Match booking code, owner name or e-mail, or pet name."""
    return (
        Q(booking_code__iexact=value) |
        Q(customer__first_name__icontains=value) |
        Q(customer__last_name__icontains=value) |
        Q(customer__email__icontains=value) |
        Q(pet__name__icontains=value)
    )


class BookingService:
    """
    Service for creating and reading appointments.

    Handles:
    - Booking orchestration (catalog, party registry, availability)
    - Per-date serialization of the availability check and insert
    - Booking code generation
    - Appointment lookup and operator listings
    """

    MAX_CODE_ATTEMPTS = 5

    def __init__(
        self,
        catalog: CatalogService = None,
        party: PartyService = None,
        availability: AvailabilityService = None,
        publisher: EventPublisher = None,
    ):
        self.publisher = publisher or EventPublisher()
        self.catalog = catalog or CatalogService()
        self.party = party or PartyService(publisher=self.publisher)
        self.availability = availability or AvailabilityService()

    @property
    def rules(self):
        return self.availability.rules

    # ==========================================================================
    # Booking
    # ==========================================================================

    def create_booking(self, request: BookingRequest) -> BookingResult:
        """
        Create an appointment from a validated request.

        Customer and pet records created along the way are kept even if
        the slot turns out to be taken.

        Raises:
            ValidationError, UnknownServiceError, InactiveServiceError,
            SlotUnavailableError, StorageError
        """
        self._validate_request(request)

        # 1. Resolve services and total duration
        selections = self.catalog.resolve_selection(
            (selection.code, selection.quantity) for selection in request.services
        )
        total_duration = self.catalog.total_duration(selections)

        # 2. Resolve customer and pet
        owner = request.owner
        customer = self.party.resolve_customer(
            email=owner.email,
            first_name=owner.first_name,
            last_name=owner.last_name,
            phone=owner.phone,
            address=owner.address,
            emergency_contact=owner.emergency_contact,
            marketing_consent=request.preferences.marketing_consent,
        )
        pet = self.party.resolve_pet(
            customer,
            name=request.pet.name,
            breed=request.pet.breed,
            size=request.pet.size,
            notes=request.pet.notes,
        )

        # 3-5. Check the slot and persist under the date lock
        appointment = self._reserve(request, customer, pet, selections, total_duration)

        logger.info(
            f"Booking created: {appointment.booking_code} on {appointment.date} "
            f"at {appointment.time:%H:%M} ({total_duration} min) "
            f"for {mask_email(customer.email)}"
        )

        # 6. Notify after commit; failures there never reach the caller
        payload = self.notification_payload(appointment, request.preferences)
        transaction.on_commit(
            lambda: self.publisher.publish(
                EventType.BOOKING_CREATED,
                payload,
                correlation_id=appointment.booking_code,
            )
        )

        return BookingResult(booking_code=appointment.booking_code, appointment=appointment)

    @translate_database_errors('booking.create')
    def _reserve(
        self,
        request: BookingRequest,
        customer: Customer,
        pet: Pet,
        selections: List[Tuple[Service, int]],
        total_duration: int,
    ) -> Appointment:
        try:
            with transaction.atomic():
                self._lock_date(request.date)

                slots = mark_occupancy(
                    generate_day_schedule(request.date, self.rules),
                    self.availability.occupants_for_date(request.date),
                )
                slots_for_booking(
                    request.date, request.time, total_duration, slots, self.rules
                )

                now = timezone.now()
                initial_status = (
                    Appointment.Status.CONFIRMED
                    if getattr(settings, 'BOOKING_AUTO_CONFIRM', True)
                    else Appointment.Status.PENDING
                )

                appointment = Appointment.objects.create(
                    booking_code=self._generate_unique_code(),
                    customer=customer,
                    pet=pet,
                    date=request.date,
                    time=request.time,
                    total_duration_minutes=total_duration,
                    status=initial_status,
                    status_changed_at=now,
                    notes=request.notes or '',
                )
                AppointmentService.objects.bulk_create([
                    AppointmentService(
                        appointment=appointment,
                        service=service,
                        quantity=quantity,
                        unit_duration_minutes=service.duration_minutes,
                        unit_price=service.price,
                    )
                    for service, quantity in selections
                ])
        except IntegrityError:
            # The (date, time) constraint caught a booking the lock did not
            conflict = Appointment.get_for_date(request.date).filter(time=request.time).first()
            if conflict is None:
                raise
            logger.warning(
                f"Slot race on {request.date} {request.time:%H:%M} lost to {conflict.booking_code}"
            )
            raise SlotUnavailableError(
                request.date,
                request.time,
                conflicting_booking=conflict.booking_code,
            )

        return appointment

    def _lock_date(self, day: date) -> CalendarDay:
        """
        Take the write lock that serializes bookings for `day`.

        The UPDATE runs first in the transaction so it holds the row lock
        on PostgreSQL and the database write lock on SQLite until commit.
        """
        now = timezone.now()
        if not CalendarDay.objects.filter(date=day).update(locked_at=now):
            CalendarDay.objects.get_or_create(date=day, defaults={'locked_at': now})
        return CalendarDay.objects.select_for_update().get(date=day)

    def _generate_unique_code(self) -> str:
        for _ in range(self.MAX_CODE_ATTEMPTS):
            code = generate_booking_code()
            if not Appointment.objects.filter(booking_code=code).exists():
                return code
        raise StorageError("Could not allocate a booking code", operation='booking.code')

    def _validate_request(self, request: BookingRequest):
        errors: Dict[str, List[str]] = {}

        def require(name: str, value):
            if value is None or (isinstance(value, str) and not value.strip()):
                errors.setdefault(name, []).append("This field is required.")

        require('owner.first_name', request.owner.first_name)
        require('owner.last_name', request.owner.last_name)
        require('owner.email', request.owner.email)
        require('owner.phone', request.owner.phone)
        require('pet.name', request.pet.name)
        require('pet.breed', request.pet.breed)
        require('date', request.date)
        require('time', request.time)

        if not request.services:
            errors.setdefault('services', []).append("Select at least one service.")

        if request.pet.size and request.pet.size not in Pet.Size.values:
            errors.setdefault('pet.size', []).append(
                f"Size must be one of: {', '.join(Pet.Size.values)}."
            )

        if request.date and request.time:
            now = timezone.localtime()
            if request.date < now.date():
                errors.setdefault('date', []).append("Date is in the past.")
            elif request.date == now.date() and request.time <= now.time():
                errors.setdefault('time', []).append("Time has already passed.")

        if errors:
            raise ValidationError(errors=errors)

    # ==========================================================================
    # Lookup
    # ==========================================================================

    def appointment_queryset(self) -> QuerySet:
        return (
            Appointment.objects
            .select_related('customer', 'pet')
            .prefetch_related('service_lines__service')
        )

    @translate_database_errors('booking.get_appointment')
    def get_appointment(self, booking_code: str) -> Appointment:
        try:
            return self.appointment_queryset().get(booking_code=booking_code)
        except Appointment.DoesNotExist:
            raise NotFoundError('Appointment', booking_code)

    # ==========================================================================
    # Notification payload
    # ==========================================================================

    @staticmethod
    def notification_payload(
        appointment: Appointment,
        preferences: Preferences = None,
    ) -> Dict[str, Any]:
        preferences = preferences or Preferences()
        customer = appointment.customer
        pet = appointment.pet
        lines = list(appointment.service_lines.select_related('service'))

        return {
            'booking_code': appointment.booking_code,
            'status': appointment.status,
            'date': appointment.date,
            'time': appointment.time,
            'end_time': appointment.end_at.time(),
            'duration_minutes': appointment.total_duration_minutes,
            'customer': {
                'id': customer.id,
                'first_name': customer.first_name,
                'last_name': customer.last_name,
                'email': customer.email,
                'phone': customer.phone,
            },
            'pet': {
                'name': pet.name,
                'breed': pet.breed,
                'size': pet.size,
            },
            'services': [
                {
                    'code': line.service_id,
                    'name': line.service.name,
                    'quantity': line.quantity,
                    'duration_minutes': line.unit_duration_minutes,
                    'price': line.unit_price,
                }
                for line in lines
            ],
            'total_price': sum(
                (line.unit_price * line.quantity for line in lines),
                Decimal('0.00')
            ),
            'notes': appointment.notes,
            'preferences': {
                'marketing_consent': preferences.marketing_consent,
                'contact_method': preferences.contact_method,
                'reminder_preference': preferences.reminder_preference,
            },
        }
