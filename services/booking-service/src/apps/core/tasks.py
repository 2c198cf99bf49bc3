# services/booking-service/src/apps/core/tasks.py
"""
Celery Tasks for Booking Notifications

Delivers the e-mails that follow a new booking and posts operator
alerts when delivery fails. None of this runs inside the booking
request.
"""

import logging
from typing import Dict, Any

import httpx
from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives

from shared.common.utils import mask_email, mask_phone, format_duration

logger = logging.getLogger(__name__)

SENSITIVE_KEYS = {'email', 'phone'}


def sanitize_context(value):
    """Mask e-mail and phone values anywhere in an alert context."""
    if isinstance(value, dict):
        sanitized = {}
        for key, item in value.items():
            if key in SENSITIVE_KEYS and isinstance(item, str):
                sanitized[key] = mask_email(item) if key == 'email' else mask_phone(item)
            else:
                sanitized[key] = sanitize_context(item)
        return sanitized
    if isinstance(value, list):
        return [sanitize_context(item) for item in value]
    return value


def _service_lines(payload: Dict[str, Any]) -> str:
    return '\n'.join(
        f"  - {line['name']}"
        + (f" x{line['quantity']}" if line.get('quantity', 1) > 1 else '')
        + f" ({format_duration(line['duration_minutes'] * line.get('quantity', 1))})"
        for line in payload.get('services', [])
    )


def build_customer_email(payload: Dict[str, Any]) -> EmailMultiAlternatives:
    customer = payload['customer']
    pet = payload['pet']
    business = getattr(settings, 'BUSINESS_NAME', 'Pet Spa')

    body = (
        f"Hi {customer['first_name']},\n\n"
        f"Thanks for booking with {business}! Here are the details for {pet['name']}:\n\n"
        f"Booking code: {payload['booking_code']}\n"
        f"Date: {payload['date']}\n"
        f"Time: {payload['time']} - {payload['end_time']}\n"
        f"Services:\n{_service_lines(payload)}\n"
        f"Total: ${payload['total_price']}\n\n"
        f"Please quote your booking code if you need to change your appointment.\n"
    )
    return EmailMultiAlternatives(
        subject=f"{business} booking confirmed: {payload['booking_code']}",
        body=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[customer['email']],
    )


def build_business_email(payload: Dict[str, Any]) -> EmailMultiAlternatives:
    customer = payload['customer']
    pet = payload['pet']
    preferences = payload.get('preferences') or {}

    body = (
        f"New booking {payload['booking_code']} ({payload['status']})\n\n"
        f"When: {payload['date']} {payload['time']} - {payload['end_time']} "
        f"({format_duration(payload['duration_minutes'])})\n"
        f"Customer: {customer['first_name']} {customer['last_name']}\n"
        f"Email: {customer['email']}\n"
        f"Phone: {customer['phone']}\n"
        f"Pet: {pet['name']} ({pet['breed']}, {pet['size']})\n"
        f"Services:\n{_service_lines(payload)}\n"
        f"Total: ${payload['total_price']}\n"
        f"Contact method: {preferences.get('contact_method') or 'not specified'}\n"
        f"Reminders: {preferences.get('reminder_preference') or 'not specified'}\n"
        f"Marketing consent: {'yes' if preferences.get('marketing_consent') else 'no'}\n"
    )
    if payload.get('notes'):
        body += f"\nNotes: {payload['notes']}\n"

    return EmailMultiAlternatives(
        subject=f"New booking: {pet['name']} on {payload['date']} at {payload['time']}",
        body=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[settings.BUSINESS_NOTIFICATION_EMAIL],
        reply_to=[customer['email']],
    )


def _deliver(task, event: Dict[str, Any], build_message, audience: str) -> Dict[str, Any]:
    """Send one notification, retrying only this message on failure."""
    payload = event['payload']
    booking_code = payload['booking_code']

    try:
        build_message(payload).send(fail_silently=False)
    except Exception as e:
        if task.request.retries < task.max_retries:
            logger.warning(
                f"{audience.capitalize()} notification for {booking_code} failed, retrying: {e}",
                extra={'booking_code': booking_code, 'audience': audience, 'retries': task.request.retries}
            )
            raise task.retry(exc=e, countdown=task.default_retry_delay * (2 ** task.request.retries))

        logger.error(
            f"{audience.capitalize()} notification for {booking_code} failed "
            f"after {task.request.retries} retries: {e}",
            extra={'booking_code': booking_code, 'audience': audience}
        )
        queue_error_alert(
            endpoint=f'booking.notifications.{audience}',
            error=str(e),
            context={
                'booking_code': booking_code,
                'customer': payload.get('customer', {}),
            },
        )
        return {'success': False, 'booking_code': booking_code, 'audience': audience, 'error': str(e)}

    logger.info(f"{audience.capitalize()} notification sent for {booking_code}")
    return {'success': True, 'booking_code': booking_code, 'audience': audience}


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_customer_confirmation(self, event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Send the booking confirmation to the customer.

    Args:
        event: booking.created event envelope

    Returns:
        Dict with send result
    """
    return _deliver(self, event, build_customer_email, 'customer')


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_business_notification(self, event: Dict[str, Any]) -> Dict[str, Any]:
    """Send the new-booking notice to the front desk."""
    return _deliver(self, event, build_business_email, 'business')


def queue_booking_notifications(event: Dict[str, Any]) -> None:
    """Enqueue each booking notification as its own task."""
    send_customer_confirmation.delay(event)
    send_business_notification.delay(event)


@shared_task(bind=True, max_retries=3, default_retry_delay=30)
def send_error_alert(
    self,
    endpoint: str,
    error: str,
    context: Dict[str, Any] = None
) -> Dict[str, Any]:
    """
    Post an operator alert to the configured chat webhook.

    Contact details in `context` are masked before sending.
    """
    webhook_url = getattr(settings, 'ERROR_ALERT_WEBHOOK_URL', '')
    context = sanitize_context(context or {})

    if not webhook_url:
        logger.warning(
            f"Error alert for {endpoint} not sent: no webhook configured",
            extra={'endpoint': endpoint, 'error': error}
        )
        return {'success': False, 'error': 'Webhook not configured'}

    message = {
        'text': f":rotating_light: {getattr(settings, 'SERVICE_NAME', 'booking-service')} error",
        'blocks': [
            {
                'type': 'section',
                'text': {
                    'type': 'mrkdwn',
                    'text': f"*Endpoint:* `{endpoint}`\n*Error:* {error}",
                },
            },
            {
                'type': 'section',
                'text': {
                    'type': 'mrkdwn',
                    'text': '\n'.join(f"*{key}:* {value}" for key, value in context.items()) or '_no context_',
                },
            },
        ],
    }

    try:
        response = httpx.post(
            webhook_url,
            json=message,
            timeout=getattr(settings, 'ERROR_ALERT_TIMEOUT', 5.0),
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Error alert delivery failed for {endpoint}: {e}")
        if self.request.retries < self.max_retries:
            raise self.retry(exc=e)
        return {'success': False, 'error': str(e)}

    return {'success': True}


def queue_error_alert(endpoint: str, error: str, context: Dict[str, Any] = None) -> bool:
    """Enqueue an operator alert without letting broker trouble escape."""
    try:
        send_error_alert.delay(endpoint=endpoint, error=error, context=context or {})
        return True
    except Exception as e:
        logger.error(f"Could not queue error alert for {endpoint}: {e}")
        return False
