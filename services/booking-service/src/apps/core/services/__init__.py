# services/booking-service/src/apps/core/services/__init__.py
"""
Booking Service Business Logic
"""

from .exceptions import (
    BookingServiceError,
    ValidationError,
    UnknownServiceError,
    InactiveServiceError,
    SlotUnavailableError,
    InvalidTransitionError,
    NotFoundError,
    StorageError,
)
from .availability_service import (
    AvailabilityService,
    DayAvailability,
    Occupant,
    OperatingRules,
    TimeSlot,
    generate_day_schedule,
    mark_occupancy,
    slots_for_booking,
)
from .catalog_service import CatalogService
from .party_service import PartyService
from .booking_service import (
    BookingService,
    BookingRequest,
    BookingResult,
    OwnerDetails,
    PetDetails,
    Preferences,
    ServiceSelection,
)
from .status_service import StatusService


__all__ = [
    # Services
    'AvailabilityService',
    'BookingService',
    'CatalogService',
    'PartyService',
    'StatusService',

    # Values
    'BookingRequest',
    'BookingResult',
    'DayAvailability',
    'Occupant',
    'OperatingRules',
    'OwnerDetails',
    'PetDetails',
    'Preferences',
    'ServiceSelection',
    'TimeSlot',

    # Pure availability functions
    'generate_day_schedule',
    'mark_occupancy',
    'slots_for_booking',

    # Exceptions
    'BookingServiceError',
    'ValidationError',
    'UnknownServiceError',
    'InactiveServiceError',
    'SlotUnavailableError',
    'InvalidTransitionError',
    'NotFoundError',
    'StorageError',
]
