# services/booking-service/src/apps/core/models/__init__.py
"""
Booking Service Models
"""

from .party import Customer, Pet
from .catalog import Service
from .appointment import Appointment, AppointmentService, CalendarDay

__all__ = [
    'Customer',
    'Pet',
    'Service',
    'Appointment',
    'AppointmentService',
    'CalendarDay',
]
