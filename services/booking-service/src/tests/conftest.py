# services/booking-service/src/tests/conftest.py
"""
Pytest Configuration and Fixtures for Booking Service Tests
"""

import itertools
from datetime import time, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient


_codes = itertools.count(1)


def next_weekday(weekday: int, min_days: int = 7):
    """First date with `weekday` at least `min_days` from today."""
    day = timezone.localdate() + timedelta(days=min_days)
    while day.weekday() != weekday:
        day += timedelta(days=1)
    return day


@pytest.fixture(autouse=True)
def clear_cache():
    """Catalog listings are cached; start every test cold."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Provide an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def staff_user(db):
    """Provide an operator account."""
    User = get_user_model()
    return User.objects.create_user(
        username='frontdesk',
        email='frontdesk@example.com',
        password='not-a-real-password',
        is_staff=True,
    )


@pytest.fixture
def admin_client(staff_user):
    """Provide an API client authenticated as an operator."""
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


@pytest.fixture
def open_date():
    """A Tuesday at least a week out; the spa is open on Tuesdays."""
    return next_weekday(1)


@pytest.fixture
def closed_date():
    """A Sunday at least a week out."""
    return next_weekday(6)


@pytest.fixture
def catalog(db):
    """Provide a small catalog with one retired entry."""
    from apps.core.models import Service

    entries = [
        ('bath-bliss', 'Bath Time Bliss', 60, Decimal('45.00'), Service.Category.BATH, True),
        ('mini-makeover', 'Mini Makeover', 30, Decimal('35.00'), Service.Category.GROOMING, True),
        ('nail-trim', 'Nail Trim', 15, Decimal('15.00'), Service.Category.ADDON, True),
        ('full-glam', 'Full Glam Groom', 120, Decimal('85.00'), Service.Category.GROOMING, True),
        ('paw-balm', 'Paw Balm', 15, Decimal('8.00'), Service.Category.ADDON, False),
    ]
    services = {}
    for order, (code, name, duration, price, category, active) in enumerate(entries):
        services[code] = Service.objects.create(
            code=code,
            name=name,
            duration_minutes=duration,
            price=price,
            category=category,
            is_active=active,
            display_order=order,
        )
    return services


@pytest.fixture
def create_customer(db):
    """Factory fixture for creating customers."""
    from apps.core.models import Customer

    def _create_customer(**kwargs):
        defaults = {
            'email': f'owner{next(_codes)}@example.com',
            'first_name': 'Dana',
            'last_name': 'Reyes',
            'phone': '555-0100',
        }
        defaults.update(kwargs)

        return Customer.objects.create(**defaults)

    return _create_customer


@pytest.fixture
def create_pet(create_customer):
    """Factory fixture for creating pets."""
    from apps.core.models import Pet

    def _create_pet(customer=None, **kwargs):
        defaults = {
            'name': 'Biscuit',
            'breed': 'Beagle',
            'size': Pet.Size.MEDIUM,
        }
        defaults.update(kwargs)

        return Pet.objects.create(customer=customer or create_customer(), **defaults)

    return _create_pet


@pytest.fixture
def create_appointment(create_pet, open_date, catalog):
    """
    Factory fixture for creating appointments directly.

    `services` is a list of catalog codes; the duration defaults to
    the sum of their durations.
    """
    from apps.core.models import Appointment, AppointmentService

    def _create_appointment(pet=None, services=('bath-bliss',), **kwargs):
        pet = pet or create_pet()
        lines = [catalog[code] for code in services]
        defaults = {
            'booking_code': f'PS-TEST{next(_codes):04d}',
            'customer': pet.customer,
            'pet': pet,
            'date': open_date,
            'time': time(10, 0),
            'total_duration_minutes': sum(s.duration_minutes for s in lines),
            'status': Appointment.Status.CONFIRMED,
            'status_changed_at': timezone.now(),
        }
        defaults.update(kwargs)

        appointment = Appointment.objects.create(**defaults)
        for service in lines:
            AppointmentService.objects.create(
                appointment=appointment,
                service=service,
                quantity=1,
                unit_duration_minutes=service.duration_minutes,
                unit_price=service.price,
            )
        return appointment

    return _create_appointment


@pytest.fixture
def booking_request(open_date):
    """Factory fixture for booking requests handed to BookingService."""
    from apps.core.services import (
        BookingRequest,
        OwnerDetails,
        PetDetails,
        Preferences,
        ServiceSelection,
    )

    def _booking_request(services=('bath-bliss',), **kwargs):
        owner = {
            'first_name': 'Dana',
            'last_name': 'Reyes',
            'email': 'dana@example.com',
            'phone': '555-0100',
        }
        owner.update(kwargs.pop('owner', {}))
        pet = {'name': 'Biscuit', 'breed': 'Beagle', 'size': 'medium'}
        pet.update(kwargs.pop('pet', {}))

        defaults = {
            'services': [
                s if isinstance(s, ServiceSelection) else ServiceSelection(code=s)
                for s in services
            ],
            'date': open_date,
            'time': time(10, 0),
            'pet': PetDetails(**pet),
            'owner': OwnerDetails(**owner),
            'preferences': Preferences(),
        }
        defaults.update(kwargs)

        return BookingRequest(**defaults)

    return _booking_request


@pytest.fixture
def booking_payload(open_date):
    """Provide a public booking request body."""
    return {
        'services': ['bath-bliss', {'code': 'nail-trim', 'quantity': 1}],
        'date': open_date.isoformat(),
        'time': '10:00',
        'pet': {
            'name': 'Biscuit',
            'breed': 'Beagle',
            'size': 'medium',
        },
        'owner': {
            'first_name': 'Dana',
            'last_name': 'Reyes',
            'email': 'Dana@Example.com',
            'phone': '555-0100',
        },
        'preferences': {
            'marketing_consent': True,
            'contact_method': 'email',
            'reminder_preference': 'text',
        },
        'notes': 'Nervous around dryers',
    }
