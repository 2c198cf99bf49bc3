# services/booking-service/src/tests/unit/test_tasks.py
"""
Unit Tests for Event Publishing and Celery Tasks
"""

import json
import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from unittest.mock import MagicMock, patch

import httpx
import pytest
from django.core import mail

from apps.core.events import EventPublisher, EventType, JSONEncoder
from apps.core.tasks import (
    build_business_email,
    build_customer_email,
    queue_error_alert,
    sanitize_context,
    send_business_notification,
    send_customer_confirmation,
    send_error_alert,
)


@pytest.fixture
def booking_payload_event():
    return {
        'booking_code': 'PS-ABC123XYZ9',
        'status': 'confirmed',
        'date': '2025-03-04',
        'time': '09:00',
        'end_time': '10:15',
        'duration_minutes': 75,
        'customer': {
            'id': 1,
            'first_name': 'Jane',
            'last_name': 'Doe',
            'email': 'jane@x.com',
            'phone': '555-0101',
        },
        'pet': {'name': 'Biscuit', 'breed': 'Beagle', 'size': 'medium'},
        'services': [
            {'code': 'bath-bliss', 'name': 'Bath Time Bliss', 'quantity': 1,
             'duration_minutes': 60, 'price': '45.00'},
            {'code': 'nail-trim', 'name': 'Nail Trim', 'quantity': 1,
             'duration_minutes': 15, 'price': '15.00'},
        ],
        'total_price': '60.00',
        'notes': 'Nervous around dryers',
        'preferences': {
            'marketing_consent': True,
            'contact_method': 'email',
            'reminder_preference': None,
        },
    }


class TestJSONEncoder:
    """Tests for event payload encoding."""

    def test_encodes_domain_values(self):
        value = {
            'id': uuid.UUID('12345678-1234-5678-1234-567812345678'),
            'date': date(2025, 3, 4),
            'time': time(9, 30),
            'price': Decimal('45.00'),
        }

        decoded = json.loads(json.dumps(value, cls=JSONEncoder))

        assert decoded == {
            'id': '12345678-1234-5678-1234-567812345678',
            'date': '2025-03-04',
            'time': '09:30',
            'price': '45.00',
        }


class TestEventPublisher:
    """Tests for EventPublisher."""

    def test_booking_created_dispatches_notifications(self, settings):
        settings.EVENT_BACKEND = 'celery'
        publisher = EventPublisher()

        with patch('apps.core.tasks.send_customer_confirmation') as mock_customer, \
                patch('apps.core.tasks.send_business_notification') as mock_business:
            assert publisher.publish(
                EventType.BOOKING_CREATED,
                {'booking_code': 'PS-1', 'date': date(2025, 3, 4)},
                correlation_id='PS-1',
            )

        event = mock_customer.delay.call_args[0][0]
        assert mock_business.delay.call_args[0][0] == event
        assert event['event_type'] == EventType.BOOKING_CREATED
        assert event['correlation_id'] == 'PS-1'
        assert event['payload']['date'] == '2025-03-04'

    def test_timestamp_is_timezone_aware(self):
        with patch('apps.core.tasks.queue_booking_notifications') as mock_queue:
            EventPublisher().publish(EventType.BOOKING_CREATED, {'booking_code': 'PS-1'})

        event = mock_queue.call_args[0][0]
        assert datetime.fromisoformat(event['timestamp']).utcoffset() == timedelta(0)

    def test_status_events_not_notified(self):
        publisher = EventPublisher()

        with patch('apps.core.tasks.queue_booking_notifications') as mock_queue:
            assert publisher.publish(EventType.BOOKING_CANCELLED, {'booking_code': 'PS-1'})

        mock_queue.assert_not_called()

    def test_disabled(self, settings):
        settings.EVENT_PUBLISHING_ENABLED = False

        assert EventPublisher().publish(EventType.BOOKING_CREATED, {}) is False

    def test_failure_is_reported_not_raised(self):
        publisher = EventPublisher()

        with patch('apps.core.tasks.send_customer_confirmation') as mock_task, \
                patch('apps.core.tasks.queue_error_alert') as mock_alert:
            mock_task.delay.side_effect = ConnectionError('broker down')
            result = publisher.publish(EventType.BOOKING_CREATED, {'booking_code': 'PS-1'})

        assert result is False
        assert mock_alert.call_args.kwargs['endpoint'] == 'events:booking.created'


class TestNotificationTasks:
    """Tests for the per-recipient notification tasks."""

    def test_customer_confirmation_sent(self, booking_payload_event):
        result = send_customer_confirmation.apply(args=[{'payload': booking_payload_event}]).get()

        assert result == {'success': True, 'booking_code': 'PS-ABC123XYZ9', 'audience': 'customer'}
        assert [m.to for m in mail.outbox] == [['jane@x.com']]

    def test_business_failure_retries_only_business_email(self, booking_payload_event):
        with patch('apps.core.tasks.build_business_email') as mock_build, \
                patch('apps.core.tasks.queue_error_alert') as mock_alert:
            mock_build.return_value.send.side_effect = OSError('smtp down')
            result = send_business_notification.apply(args=[{'payload': booking_payload_event}]).get()

        assert result['success'] is False
        assert result['audience'] == 'business'
        # First attempt plus three retries
        assert mock_build.return_value.send.call_count == 4
        assert mail.outbox == []
        assert mock_alert.call_args.kwargs['endpoint'] == 'booking.notifications.business'


class TestNotificationEmails:
    """Tests for the notification message builders."""

    def test_customer_email(self, booking_payload_event):
        message = build_customer_email(booking_payload_event)

        assert message.to == ['jane@x.com']
        assert 'PS-ABC123XYZ9' in message.subject
        assert 'Biscuit' in message.body
        assert 'Bath Time Bliss (1h)' in message.body
        assert 'Total: $60.00' in message.body

    def test_business_email(self, booking_payload_event, settings):
        settings.BUSINESS_NOTIFICATION_EMAIL = 'desk@example.com'

        message = build_business_email(booking_payload_event)

        assert message.to == ['desk@example.com']
        assert message.reply_to == ['jane@x.com']
        assert 'Phone: 555-0101' in message.body
        assert 'Contact method: email' in message.body
        assert 'Reminders: not specified' in message.body
        assert 'Marketing consent: yes' in message.body
        assert 'Notes: Nervous around dryers' in message.body

    def test_quantity_shown(self, booking_payload_event):
        booking_payload_event['services'][1]['quantity'] = 2

        message = build_customer_email(booking_payload_event)

        assert 'Nail Trim x2 (30m)' in message.body


class TestErrorAlerts:
    """Tests for operator error alerts."""

    def test_sanitize_context(self):
        context = {
            'email': 'jane.doe@example.com',
            'phone': '(555) 010-1234',
            'customer': {'email': 'jd@x.com', 'first_name': 'Jane'},
            'date': '2025-03-04',
        }

        sanitized = sanitize_context(context)

        assert sanitized['email'] == 'j******e@example.com'
        assert sanitized['phone'] == '******1234'
        assert sanitized['customer'] == {'email': 'j*@x.com', 'first_name': 'Jane'}
        assert sanitized['date'] == '2025-03-04'

    def test_alert_skipped_without_webhook(self, settings):
        settings.ERROR_ALERT_WEBHOOK_URL = ''

        result = send_error_alert.apply(
            kwargs={'endpoint': 'POST /api/v1/bookings/', 'error': 'boom'}
        ).get()

        assert result == {'success': False, 'error': 'Webhook not configured'}

    def test_alert_posts_masked_context(self, settings):
        settings.ERROR_ALERT_WEBHOOK_URL = 'https://hooks.example.com/alerts'
        response = MagicMock()

        with patch('apps.core.tasks.httpx.post', return_value=response) as mock_post:
            result = send_error_alert.apply(kwargs={
                'endpoint': 'POST /api/v1/bookings/',
                'error': 'Storage is temporarily unavailable',
                'context': {'email': 'jane@x.com', 'date': '2025-03-04'},
            }).get()

        assert result == {'success': True}
        url = mock_post.call_args[0][0]
        body = json.dumps(mock_post.call_args.kwargs['json'])
        assert url == 'https://hooks.example.com/alerts'
        assert 'jane@x.com' not in body
        assert 'j**e@x.com' in body

    def test_alert_delivery_failure(self, settings):
        settings.ERROR_ALERT_WEBHOOK_URL = 'https://hooks.example.com/alerts'

        with patch('apps.core.tasks.httpx.post', side_effect=httpx.ConnectError('refused')):
            result = send_error_alert.apply(
                kwargs={'endpoint': 'booking.notifications', 'error': 'smtp down'}
            ).get()

        assert result['success'] is False

    def test_queue_error_alert_swallows_broker_errors(self):
        with patch('apps.core.tasks.send_error_alert') as mock_task:
            mock_task.delay.side_effect = ConnectionError('broker down')

            assert queue_error_alert('booking.notifications', 'boom') is False
