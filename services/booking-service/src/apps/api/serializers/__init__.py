# services/booking-service/src/apps/api/serializers/__init__.py
"""
Booking API Serializers
"""

from .booking_serializers import (
    BookingCreateSerializer,
    AppointmentSerializer,
    AppointmentListSerializer,
    AppointmentDetailSerializer,
    AppointmentStatusUpdateSerializer,
)

from .availability_serializers import (
    AvailabilityQuerySerializer,
    DayAvailabilitySerializer,
)

from .catalog_serializers import (
    ServiceSerializer,
)

from .party_serializers import (
    CustomerSerializer,
    CustomerSummarySerializer,
    CustomerUpdateSerializer,
    PetMergeSerializer,
    PetSerializer,
)


__all__ = [
    # Booking
    'BookingCreateSerializer',
    'AppointmentSerializer',
    'AppointmentListSerializer',
    'AppointmentDetailSerializer',
    'AppointmentStatusUpdateSerializer',

    # Availability
    'AvailabilityQuerySerializer',
    'DayAvailabilitySerializer',

    # Catalog
    'ServiceSerializer',

    # Party
    'CustomerSerializer',
    'CustomerSummarySerializer',
    'CustomerUpdateSerializer',
    'PetMergeSerializer',
    'PetSerializer',
]
