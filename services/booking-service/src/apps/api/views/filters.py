# services/booking-service/src/apps/api/views/filters.py
"""
API Filters

Django Filter classes for operator listings.
"""

import django_filters

from apps.core.models import Appointment
from apps.core.services.booking_service import appointment_search_q


class AppointmentFilter(django_filters.FilterSet):
    """Filter for appointment queries."""

    # Date filters
    date = django_filters.DateFilter(field_name='date')
    date_from = django_filters.DateFilter(
        field_name='date',
        lookup_expr='gte'
    )
    date_to = django_filters.DateFilter(
        field_name='date',
        lookup_expr='lte'
    )

    # Status filters
    status = django_filters.ChoiceFilter(
        choices=Appointment.Status.choices
    )

    # Owner / pet text search
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Appointment
        fields = ['date', 'status']

    def filter_search(self, queryset, name, value):
        """Search by booking code, owner name or e-mail, or pet name."""
        if not value:
            return queryset
        return queryset.filter(appointment_search_q(value.strip()))
