# services/booking-service/src/apps/api/views/__init__.py
"""
Booking API Views
"""

from .booking_views import (
    BookingCreateView,
    AppointmentViewSet,
)

from .availability_views import (
    AvailabilityView,
)

from .catalog_views import (
    ServiceCatalogView,
)

from .customer_views import (
    CustomerViewSet,
)


__all__ = [
    # Booking
    'BookingCreateView',
    'AppointmentViewSet',

    # Availability
    'AvailabilityView',

    # Catalog
    'ServiceCatalogView',

    # Customers
    'CustomerViewSet',
]
