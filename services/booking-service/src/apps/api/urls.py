# services/booking-service/src/apps/api/urls.py
"""
Booking API URL Configuration

Defines all API routes for the booking service.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    # Booking
    BookingCreateView,
    AppointmentViewSet,
    # Availability
    AvailabilityView,
    # Catalog
    ServiceCatalogView,
    # Customers
    CustomerViewSet,
)

app_name = 'api'

# Create router and register viewsets
router = DefaultRouter()
router.register(r'appointments', AppointmentViewSet, basename='appointment')
router.register(r'customers', CustomerViewSet, basename='customer')

urlpatterns = [
    # Public booking flow
    path('bookings/', BookingCreateView.as_view(), name='booking-create'),
    path('availability/', AvailabilityView.as_view(), name='availability'),
    path('services/', ServiceCatalogView.as_view(), name='service-catalog'),

    # Router URLs
    path('', include(router.urls)),
]
