# services/booking-service/src/apps/api/views/booking_views.py
"""
Booking API Views

Public booking creation and operator appointment management.
"""

import logging

from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny, IsAdminUser
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.services import (
    BookingService,
    StatusService,
    StorageError,
)
from apps.core.tasks import queue_error_alert
from apps.api.serializers import (
    BookingCreateSerializer,
    AppointmentListSerializer,
    AppointmentDetailSerializer,
    AppointmentStatusUpdateSerializer,
)
from .filters import AppointmentFilter

logger = logging.getLogger(__name__)


class BookingCreateView(APIView):
    """
    Public endpoint for new bookings.

    Domain errors are rendered by the shared exception handler.
    """

    permission_classes = [AllowAny]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.booking_service = BookingService()

    def post(self, request):
        """Create a new booking."""
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking_request = serializer.to_booking_request()
        try:
            result = self.booking_service.create_booking(booking_request)
        except StorageError as e:
            queue_error_alert(
                endpoint='POST /api/v1/bookings/',
                error=e.message,
                context={
                    'request_id': getattr(request, 'request_id', None),
                    'date': str(booking_request.date),
                    'time': booking_request.time.strftime('%H:%M'),
                    'email': booking_request.owner.email,
                    'phone': booking_request.owner.phone,
                },
            )
            raise

        return Response(
            {
                'success': True,
                'booking_code': result.booking_code,
                'appointment': AppointmentDetailSerializer(result.appointment).data,
            },
            status=status.HTTP_201_CREATED
        )


class AppointmentViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for operator appointment management.

    Read access plus the status workflow actions.
    """

    permission_classes = [IsAdminUser]
    lookup_field = 'booking_code'
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = AppointmentFilter
    ordering_fields = ['date', 'time', 'created_at', 'status']
    ordering = ['date', 'time']

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.booking_service = BookingService()
        self.status_service = StatusService()

    def get_queryset(self):
        return self.booking_service.appointment_queryset()

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action == 'list':
            return AppointmentListSerializer
        elif self.action == 'update_status':
            return AppointmentStatusUpdateSerializer
        return AppointmentDetailSerializer

    def retrieve(self, request, *args, **kwargs):
        """Get appointment by booking code."""
        appointment = self.booking_service.get_appointment(kwargs['booking_code'])
        return Response(AppointmentDetailSerializer(appointment).data)

    def _respond(self, appointment):
        appointment = self.booking_service.get_appointment(appointment.booking_code)
        return Response(AppointmentDetailSerializer(appointment).data)

    @action(detail=True, methods=['patch'], url_path='status')
    def update_status(self, request, booking_code=None):
        """Move the appointment to the requested status."""
        serializer = AppointmentStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        appointment = self.status_service.update_status(
            booking_code, serializer.validated_data['status']
        )
        return self._respond(appointment)

    @action(detail=True, methods=['post'])
    def confirm(self, request, booking_code=None):
        """Confirm a pending appointment."""
        return self._respond(self.status_service.confirm(booking_code))

    @action(detail=True, methods=['post'])
    def complete(self, request, booking_code=None):
        """Mark a confirmed appointment as completed."""
        return self._respond(self.status_service.complete(booking_code))

    @action(detail=True, methods=['post'])
    def cancel(self, request, booking_code=None):
        """Cancel a pending or confirmed appointment."""
        return self._respond(self.status_service.cancel(booking_code))
