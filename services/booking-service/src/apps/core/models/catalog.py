# services/booking-service/src/apps/core/models/catalog.py
"""
Catalog Model

Bookable services offered by the spa.
"""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from shared.common.mixins import TimestampMixin


class Service(TimestampMixin):
    """
    A bookable catalog entry.

    Bookings reference services by code and never modify them.
    """

    class Category(models.TextChoices):
        GROOMING = 'grooming', 'Grooming'
        BATH = 'bath', 'Bath'
        ADDON = 'addon', 'Add-on'
        BOARDING = 'boarding', 'Boarding'

    code = models.SlugField(max_length=50, primary_key=True)
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True, default='')
    duration_minutes = models.PositiveIntegerField(
        validators=[MinValueValidator(1)]
    )
    price = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        db_index=True
    )
    is_active = models.BooleanField(default=True, db_index=True)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'services'
        ordering = ['display_order', 'name']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(duration_minutes__gt=0),
                name='service_duration_positive'
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.duration_minutes} min)"
