# services/booking-service/src/apps/core/events.py
"""
Booking Service Events

Event definitions and publishing for the booking service.
Booking events are handed to Celery workers for notification delivery.
"""

import json
import logging
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict
from uuid import UUID

from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)


class EventType:
    """Event type constants for booking service."""

    # Booking lifecycle events
    BOOKING_CREATED = 'booking.created'
    BOOKING_CONFIRMED = 'booking.confirmed'
    BOOKING_COMPLETED = 'booking.completed'
    BOOKING_CANCELLED = 'booking.cancelled'

    # Party registry events
    PETS_MERGED = 'pets.merged'


# Events that result in outbound notifications
NOTIFIED_EVENTS = frozenset({EventType.BOOKING_CREATED})


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for event payloads."""

    def default(self, obj):
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, time):
            return obj.strftime('%H:%M')
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


class EventPublisher:
    """
    Event publisher for booking service.

    Publishing never raises. A failed publish is logged and reported
    to operators as an error alert.
    """

    def __init__(self):
        self.service_name = getattr(settings, 'SERVICE_NAME', 'booking-service')
        self.enabled = getattr(settings, 'EVENT_PUBLISHING_ENABLED', True)

    def publish(
        self,
        event_type: str,
        payload: Dict[str, Any],
        correlation_id: str = None,
    ) -> bool:
        """
        Publish an event.

        Args:
            event_type: Type of event (e.g., 'booking.created')
            payload: Event data
            correlation_id: Optional correlation ID for tracing

        Returns:
            True if published successfully, False otherwise
        """
        if not self.enabled:
            logger.debug(f"Event publishing disabled, skipping: {event_type}")
            return False

        event = {
            'event_type': event_type,
            'service': self.service_name,
            'timestamp': timezone.now().isoformat(),
            'correlation_id': correlation_id or str(uuid.uuid4()),
            'payload': payload,
        }

        try:
            # Round-trip through JSON so workers receive plain values
            event = json.loads(json.dumps(event, cls=JSONEncoder))

            logger.info(f"Publishing event: {event_type}", extra={
                'event_type': event_type,
                'correlation_id': event['correlation_id'],
            })

            self._publish_to_backend(event_type, event)
            return True

        except Exception as e:
            logger.error(f"Failed to publish event {event_type}: {e}")
            self._report_failure(event_type, e)
            return False

    def _publish_to_backend(self, event_type: str, event: Dict[str, Any]):
        """Publish to the configured backend."""
        backend = getattr(settings, 'EVENT_BACKEND', 'celery')

        if backend == 'celery' and event_type in NOTIFIED_EVENTS:
            from apps.core.tasks import queue_booking_notifications
            queue_booking_notifications(event)
        else:
            logger.debug(f"Event payload: {json.dumps(event)[:500]}")

    def _report_failure(self, event_type: str, error: Exception):
        from apps.core.tasks import queue_error_alert
        queue_error_alert(
            endpoint=f"events:{event_type}",
            error=str(error),
            context={'event_type': event_type},
        )
