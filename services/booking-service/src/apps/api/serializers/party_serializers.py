# services/booking-service/src/apps/api/serializers/party_serializers.py
"""
Party Serializers

Customers and pets for operator views.
"""

from rest_framework import serializers

from apps.core.models import Customer, Pet


class PetSerializer(serializers.ModelSerializer):
    size_display = serializers.CharField(source='get_size_display', read_only=True)

    class Meta:
        model = Pet
        fields = ['id', 'name', 'breed', 'size', 'size_display', 'notes', 'created_at']
        read_only_fields = fields


class CustomerSummarySerializer(serializers.ModelSerializer):
    """Customer identity and contact details, without pets."""

    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Customer
        fields = ['id', 'email', 'first_name', 'last_name', 'full_name', 'phone']
        read_only_fields = fields


class CustomerSerializer(serializers.ModelSerializer):
    """Customer with pets and booking count."""

    full_name = serializers.CharField(read_only=True)
    pets = PetSerializer(many=True, read_only=True)
    appointment_count = serializers.SerializerMethodField()

    class Meta:
        model = Customer
        fields = [
            'id', 'email', 'first_name', 'last_name', 'full_name',
            'phone', 'address', 'emergency_contact', 'marketing_consent',
            'pets', 'appointment_count',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_appointment_count(self, obj) -> int:
        return obj.appointments.count()


class CustomerUpdateSerializer(serializers.Serializer):
    """Administrative customer update; every field optional."""

    email = serializers.EmailField(max_length=254, required=False)
    first_name = serializers.CharField(max_length=100, required=False)
    last_name = serializers.CharField(max_length=100, required=False)
    phone = serializers.CharField(max_length=30, required=False)
    address = serializers.CharField(required=False, allow_blank=True)
    emergency_contact = serializers.CharField(max_length=255, required=False, allow_blank=True)
    marketing_consent = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide at least one field to update.")
        return attrs


class PetMergeSerializer(serializers.Serializer):
    source_pet_id = serializers.IntegerField()
    target_pet_id = serializers.IntegerField()
