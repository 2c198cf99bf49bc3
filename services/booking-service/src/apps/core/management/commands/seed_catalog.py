# services/booking-service/src/apps/core/management/commands/seed_catalog.py
"""
Load the default service catalog.

Safe to run repeatedly: entries are matched by code and updated in place.
"""

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.core.models import Service

DEFAULT_CATALOG = [
    {
        'code': 'bath-bliss',
        'name': 'Bath Time Bliss',
        'description': 'Shampoo, conditioner, blow dry and brush out.',
        'duration_minutes': 60,
        'price': Decimal('45.00'),
        'category': Service.Category.BATH,
    },
    {
        'code': 'mini-makeover',
        'name': 'Mini Makeover',
        'description': 'Face, feet and sanitary trim between full grooms.',
        'duration_minutes': 30,
        'price': Decimal('35.00'),
        'category': Service.Category.GROOMING,
    },
    {
        'code': 'full-glam',
        'name': 'Full Glam Groom',
        'description': 'Bath plus full breed-style haircut.',
        'duration_minutes': 120,
        'price': Decimal('85.00'),
        'category': Service.Category.GROOMING,
    },
    {
        'code': 'wash-small',
        'name': "Wash N Go (Small)",
        'description': 'Quick wash and dry for small dogs.',
        'duration_minutes': 30,
        'price': Decimal('15.00'),
        'category': Service.Category.BATH,
    },
    {
        'code': 'wash-medium',
        'name': "Wash N Go (Medium)",
        'description': 'Quick wash and dry for medium dogs.',
        'duration_minutes': 45,
        'price': Decimal('17.00'),
        'category': Service.Category.BATH,
    },
    {
        'code': 'wash-large',
        'name': "Wash N Go (Large)",
        'description': 'Quick wash and dry for large dogs.',
        'duration_minutes': 60,
        'price': Decimal('20.00'),
        'category': Service.Category.BATH,
    },
    {
        'code': 'nail-trim',
        'name': 'Nail Trim',
        'description': 'Clip and file.',
        'duration_minutes': 15,
        'price': Decimal('15.00'),
        'category': Service.Category.ADDON,
    },
    {
        'code': 'ear-cleaning',
        'name': 'Ear Cleaning',
        'description': 'Gentle ear flush and wipe.',
        'duration_minutes': 15,
        'price': Decimal('10.00'),
        'category': Service.Category.ADDON,
    },
    {
        'code': 'teeth-brushing',
        'name': 'Teeth Brushing',
        'description': 'Enzymatic toothpaste brushing.',
        'duration_minutes': 20,
        'price': Decimal('12.00'),
        'category': Service.Category.ADDON,
    },
    {
        'code': 'flea-treatment',
        'name': 'Flea Treatment',
        'description': 'Medicated flea bath and comb out.',
        'duration_minutes': 30,
        'price': Decimal('20.00'),
        'category': Service.Category.ADDON,
    },
    {
        'code': 'de-shedding',
        'name': 'De-shedding Treatment',
        'description': 'Undercoat removal treatment.',
        'duration_minutes': 45,
        'price': Decimal('25.00'),
        'category': Service.Category.ADDON,
    },
]


class Command(BaseCommand):
    help = 'Create or update the default service catalog'

    def add_arguments(self, parser):
        parser.add_argument(
            '--deactivate-missing',
            action='store_true',
            help='Retire services whose code is not in the default catalog',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created = updated = 0
        for order, entry in enumerate(DEFAULT_CATALOG):
            defaults = {key: value for key, value in entry.items() if key != 'code'}
            defaults['display_order'] = order
            defaults['is_active'] = True
            _, was_created = Service.objects.update_or_create(
                code=entry['code'],
                defaults=defaults,
            )
            if was_created:
                created += 1
            else:
                updated += 1

        retired = 0
        if options['deactivate_missing']:
            codes = [entry['code'] for entry in DEFAULT_CATALOG]
            for service in Service.objects.filter(is_active=True).exclude(code__in=codes):
                service.is_active = False
                service.save(update_fields=['is_active', 'updated_at'])
                retired += 1

        self.stdout.write(self.style.SUCCESS(
            f"Catalog seeded: {created} created, {updated} updated, {retired} retired"
        ))
