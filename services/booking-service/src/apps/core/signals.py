# services/booking-service/src/apps/core/signals.py
"""
Django Signals for Booking Service

Keeps the cached catalog listing in step with Service rows.
"""

import logging
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .models import Service
from .services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Service)
@receiver(post_delete, sender=Service)
def service_changed(sender, instance, **kwargs):
    """Drop the cached active catalog after any catalog change."""
    CatalogService.invalidate_cache(instance.code)
