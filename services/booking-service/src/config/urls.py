# services/booking-service/src/config/urls.py
"""
URL configuration for Booking Service
"""

from django.contrib import admin
from django.urls import path, include

from shared.common.health import get_health_urlpatterns

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('apps.api.urls', namespace='api')),
] + get_health_urlpatterns()
