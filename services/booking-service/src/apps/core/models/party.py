# services/booking-service/src/apps/core/models/party.py
"""
Party Models

Customers and the pets they bring in.
"""

from django.db import models

from shared.common.mixins import TimestampMixin


class Customer(TimestampMixin):
    """
    A pet owner.

    Identified by e-mail, stored normalized so lookups are
    case-insensitive. Only administrative updates change an
    existing record.
    """

    email = models.EmailField(max_length=254, unique=True)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    phone = models.CharField(max_length=30)
    address = models.TextField(blank=True, default='')
    emergency_contact = models.CharField(max_length=255, blank=True, default='')
    marketing_consent = models.BooleanField(default=False)

    class Meta:
        db_table = 'customers'
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return f"{self.full_name} <{self.email}>"

    def save(self, *args, **kwargs):
        self.email = self.normalize_email(self.email)
        super().save(*args, **kwargs)

    @staticmethod
    def normalize_email(email: str) -> str:
        return (email or '').strip().lower()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Pet(TimestampMixin):
    """A pet belonging to exactly one customer."""

    class Size(models.TextChoices):
        SMALL = 'small', 'Small'
        MEDIUM = 'medium', 'Medium'
        LARGE = 'large', 'Large'

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name='pets'
    )
    name = models.CharField(max_length=100)
    breed = models.CharField(max_length=100)
    size = models.CharField(
        max_length=10,
        choices=Size.choices,
        default=Size.MEDIUM
    )
    notes = models.TextField(blank=True, default='')

    class Meta:
        db_table = 'pets'
        ordering = ['name']
        indexes = [
            models.Index(fields=['customer', 'name', 'breed']),
        ]

    def __str__(self):
        return f"{self.name} ({self.breed})"
