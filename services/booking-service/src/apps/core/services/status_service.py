# services/booking-service/src/apps/core/services/status_service.py
"""
Status Service

Operator-driven appointment status transitions.
"""

import logging

from django.db import transaction
from django.utils import timezone

from apps.core.events import EventPublisher, EventType
from apps.core.models import Appointment
from .exceptions import (
    ValidationError,
    InvalidTransitionError,
    NotFoundError,
    translate_database_errors,
)

logger = logging.getLogger(__name__)


STATUS_EVENTS = {
    Appointment.Status.CONFIRMED: EventType.BOOKING_CONFIRMED,
    Appointment.Status.COMPLETED: EventType.BOOKING_COMPLETED,
    Appointment.Status.CANCELLED: EventType.BOOKING_CANCELLED,
}


class StatusService:
    """
    Service for the appointment status lifecycle.

    pending -> confirmed | cancelled
    confirmed -> completed | cancelled
    completed and cancelled are terminal.
    """

    def __init__(self, publisher: EventPublisher = None):
        self.publisher = publisher or EventPublisher()

    def confirm(self, booking_code: str) -> Appointment:
        return self.update_status(booking_code, Appointment.Status.CONFIRMED)

    def complete(self, booking_code: str) -> Appointment:
        return self.update_status(booking_code, Appointment.Status.COMPLETED)

    def cancel(self, booking_code: str) -> Appointment:
        return self.update_status(booking_code, Appointment.Status.CANCELLED)

    @translate_database_errors('status.update')
    @transaction.atomic
    def update_status(self, booking_code: str, target_status: str) -> Appointment:
        """
        Move an appointment to `target_status`.

        Only the status columns and the last-modified timestamp are
        written. A rejected transition leaves the row untouched.
        """
        if target_status not in Appointment.Status.values:
            raise ValidationError(
                f"Unknown status: {target_status}. "
                f"Expected one of: {', '.join(Appointment.Status.values)}.",
                field='status'
            )

        try:
            appointment = (
                Appointment.objects
                .select_for_update()
                .get(booking_code=booking_code)
            )
        except Appointment.DoesNotExist:
            raise NotFoundError('Appointment', booking_code)

        if not appointment.can_transition_to(target_status):
            raise InvalidTransitionError(
                booking_code, appointment.status, target_status
            )

        previous = appointment.status
        appointment.status = target_status
        appointment.status_changed_at = timezone.now()
        appointment.save(update_fields=['status', 'status_changed_at', 'updated_at'])

        logger.info(f"Appointment {booking_code} status {previous} -> {target_status}")

        payload = {
            'booking_code': booking_code,
            'previous_status': previous,
            'status': target_status,
            'date': appointment.date,
            'time': appointment.time,
        }
        transaction.on_commit(
            lambda: self.publisher.publish(
                STATUS_EVENTS[target_status],
                payload,
                correlation_id=booking_code,
            )
        )
        return appointment
