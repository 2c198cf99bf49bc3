# services/booking-service/src/apps/api/serializers/booking_serializers.py
"""
Booking Serializers

Request parsing for new bookings and representations of appointments.
"""

from decimal import Decimal
from rest_framework import serializers

from apps.core.models import Appointment, AppointmentService, Pet
from apps.core.services import (
    BookingRequest,
    OwnerDetails,
    PetDetails,
    Preferences,
    ServiceSelection,
)
from .party_serializers import CustomerSummarySerializer, PetSerializer


CLOCK_FORMATS = ['%H:%M', '%H:%M:%S']


# ==============================================================================
# Booking request
# ==============================================================================

class ServiceSelectionField(serializers.Field):
    """Accepts `"code"` or `{"code": "...", "quantity": n}`."""

    default_error_messages = {
        'invalid': 'Expected a service code or an object with "code" and "quantity".',
        'quantity': 'Quantity must be a whole number of at least 1.',
    }

    def to_internal_value(self, data):
        if isinstance(data, str):
            code, quantity = data, 1
        elif isinstance(data, dict):
            code, quantity = data.get('code'), data.get('quantity', 1)
        else:
            self.fail('invalid')

        if not isinstance(code, str) or not code.strip():
            self.fail('invalid')
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            self.fail('quantity')

        return ServiceSelection(code=code.strip(), quantity=quantity)

    def to_representation(self, value):
        return {'code': value.code, 'quantity': value.quantity}


class OwnerInputSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    email = serializers.EmailField(max_length=254)
    phone = serializers.CharField(max_length=30)
    address = serializers.CharField(required=False, allow_blank=True, default='')
    emergency_contact = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=''
    )


class PetInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    breed = serializers.CharField(max_length=100)
    size = serializers.ChoiceField(choices=Pet.Size.choices, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class PreferencesInputSerializer(serializers.Serializer):
    CONTACT_METHODS = ['email', 'phone', 'either']
    REMINDER_PREFERENCES = ['email', 'text', 'both']

    marketing_consent = serializers.BooleanField(required=False, default=False)
    contact_method = serializers.ChoiceField(
        choices=CONTACT_METHODS, required=False, allow_null=True
    )
    reminder_preference = serializers.ChoiceField(
        choices=REMINDER_PREFERENCES, required=False, allow_null=True
    )


class BookingCreateSerializer(serializers.Serializer):
    """Serializer for public booking requests."""

    services = serializers.ListField(child=ServiceSelectionField(), allow_empty=False)
    date = serializers.DateField()
    time = serializers.TimeField(input_formats=CLOCK_FORMATS)
    pet = PetInputSerializer()
    owner = OwnerInputSerializer()
    preferences = PreferencesInputSerializer(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def to_booking_request(self) -> BookingRequest:
        data = self.validated_data
        preferences = data.get('preferences') or {}
        return BookingRequest(
            services=data['services'],
            date=data['date'],
            time=data['time'],
            pet=PetDetails(**data['pet']),
            owner=OwnerDetails(**data['owner']),
            preferences=Preferences(
                marketing_consent=preferences.get('marketing_consent', False),
                contact_method=preferences.get('contact_method'),
                reminder_preference=preferences.get('reminder_preference'),
            ),
            notes=data.get('notes', ''),
        )


class AppointmentStatusUpdateSerializer(serializers.Serializer):
    """Target status for an operator transition."""

    status = serializers.ChoiceField(choices=Appointment.Status.choices)


# ==============================================================================
# Appointment representations
# ==============================================================================

class AppointmentServiceSerializer(serializers.ModelSerializer):
    code = serializers.CharField(source='service_id', read_only=True)
    name = serializers.CharField(source='service.name', read_only=True)
    duration_minutes = serializers.IntegerField(source='unit_duration_minutes', read_only=True)
    price = serializers.DecimalField(
        source='unit_price', max_digits=8, decimal_places=2, read_only=True
    )

    class Meta:
        model = AppointmentService
        fields = ['code', 'name', 'quantity', 'duration_minutes', 'price']


class AppointmentSerializer(serializers.ModelSerializer):
    """Base appointment serializer."""

    status_display = serializers.CharField(
        source='get_status_display',
        read_only=True
    )
    time = serializers.TimeField(format='%H:%M', read_only=True)
    end_time = serializers.SerializerMethodField()
    pet_name = serializers.CharField(source='pet.name', read_only=True)
    customer_name = serializers.CharField(source='customer.full_name', read_only=True)

    class Meta:
        model = Appointment
        fields = [
            'booking_code', 'status', 'status_display',
            'date', 'time', 'end_time', 'total_duration_minutes',
            'pet_name', 'customer_name',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_end_time(self, obj) -> str:
        return obj.end_at.strftime('%H:%M')


class AppointmentListSerializer(AppointmentSerializer):
    """Appointment rows for the operator list."""

    service_names = serializers.SerializerMethodField()

    class Meta(AppointmentSerializer.Meta):
        fields = AppointmentSerializer.Meta.fields + ['service_names']
        read_only_fields = fields

    def get_service_names(self, obj) -> list:
        return [line.service.name for line in obj.service_lines.all()]


class AppointmentDetailSerializer(AppointmentSerializer):
    """Full appointment including party and service lines."""

    customer = CustomerSummarySerializer(read_only=True)
    pet = PetSerializer(read_only=True)
    services = AppointmentServiceSerializer(source='service_lines', many=True, read_only=True)
    total_price = serializers.SerializerMethodField()
    allowed_transitions = serializers.SerializerMethodField()

    class Meta(AppointmentSerializer.Meta):
        fields = AppointmentSerializer.Meta.fields + [
            'customer', 'pet', 'services', 'total_price',
            'notes', 'status_changed_at', 'allowed_transitions',
        ]
        read_only_fields = fields

    def get_total_price(self, obj) -> str:
        total = sum(
            (line.unit_price * line.quantity for line in obj.service_lines.all()),
            Decimal('0.00')
        )
        return f"{total:.2f}"

    def get_allowed_transitions(self, obj) -> list:
        return sorted(obj.TRANSITIONS[Appointment.Status(obj.status)])
