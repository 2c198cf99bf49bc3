# services/booking-service/src/apps/core/services/catalog_service.py
"""
Catalog Service

Read-mostly access to bookable services.
"""

import logging
from collections import OrderedDict
from typing import Iterable, List, Optional, Tuple

from django.conf import settings
from django.core.cache import cache

from apps.core.models import Service
from .exceptions import (
    ValidationError,
    UnknownServiceError,
    InactiveServiceError,
    NotFoundError,
    translate_database_errors,
)

logger = logging.getLogger(__name__)

ACTIVE_CATALOG_CACHE_KEY = 'catalog:active-services'


class CatalogService:
    """
    Service for catalog lookups.

    The active catalog listing is cached and dropped whenever a
    Service row is saved or deleted.
    """

    @translate_database_errors('catalog.get_service')
    def get_service(self, code: str) -> Service:
        try:
            return Service.objects.get(code=code)
        except Service.DoesNotExist:
            raise NotFoundError('Service', code)

    @translate_database_errors('catalog.list_services')
    def list_services(self, include_inactive: bool = False) -> List[Service]:
        """List catalog entries in display order."""
        if include_inactive:
            return list(Service.objects.all())

        services = cache.get(ACTIVE_CATALOG_CACHE_KEY)
        if services is None:
            services = list(Service.objects.filter(is_active=True))
            cache.set(
                ACTIVE_CATALOG_CACHE_KEY,
                services,
                getattr(settings, 'CATALOG_CACHE_TIMEOUT', 300)
            )
        return services

    @translate_database_errors('catalog.resolve_selection')
    def resolve_selection(
        self,
        selections: Iterable[Tuple[str, int]]
    ) -> List[Tuple[Service, int]]:
        """
        Resolve requested (code, quantity) pairs against the catalog.

        Repeated codes are merged by summing their quantities. The
        result keeps the order in which codes were first requested.

        Raises:
            ValidationError: nothing selected, or a quantity below 1
            UnknownServiceError: a code is not in the catalog
            InactiveServiceError: a code refers to a retired service
        """
        quantities = OrderedDict()
        for code, quantity in selections:
            if quantity is None or quantity < 1:
                raise ValidationError("Quantity must be at least 1.", field='services')
            quantities[code] = quantities.get(code, 0) + quantity

        if not quantities:
            raise ValidationError("Select at least one service.", field='services')

        found = Service.objects.in_bulk(list(quantities.keys()))

        unknown = [code for code in quantities if code not in found]
        if unknown:
            raise UnknownServiceError(unknown)

        inactive = [code for code in quantities if not found[code].is_active]
        if inactive:
            raise InactiveServiceError(inactive)

        return [(found[code], quantity) for code, quantity in quantities.items()]

    @staticmethod
    def total_duration(pairs: Iterable[Tuple[Service, int]]) -> int:
        """Sum of duration x quantity over resolved services."""
        return sum(service.duration_minutes * quantity for service, quantity in pairs)

    @translate_database_errors('catalog.set_active')
    def set_active(self, code: str, active: bool) -> Service:
        """Retire or reactivate a catalog entry."""
        service = self.get_service(code)
        if service.is_active != active:
            service.is_active = active
            service.save(update_fields=['is_active', 'updated_at'])
            logger.info(f"Service {code} {'reactivated' if active else 'retired'}")
        return service

    @staticmethod
    def invalidate_cache(code: Optional[str] = None):
        cache.delete(ACTIVE_CATALOG_CACHE_KEY)
        if code:
            logger.debug(f"Catalog cache invalidated after change to {code}")
