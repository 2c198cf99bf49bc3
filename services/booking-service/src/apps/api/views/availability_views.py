# services/booking-service/src/apps/api/views/availability_views.py
"""
Availability API Views

Public day schedule with slot occupancy.
"""

import logging

from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny

from apps.core.services import AvailabilityService
from apps.api.serializers import (
    AvailabilityQuerySerializer,
    DayAvailabilitySerializer,
)

logger = logging.getLogger(__name__)


class AvailabilityView(APIView):
    """
    Slots for one date.

    Query params:
        date: YYYY-MM-DD
    """

    permission_classes = [AllowAny]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.availability_service = AvailabilityService()

    def get(self, request):
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        day = self.availability_service.get_day_availability(query.validated_data['date'])
        return Response(DayAvailabilitySerializer(day).data)
