# services/booking-service/src/apps/api/serializers/availability_serializers.py
"""
Availability Serializers

Day schedule with occupancy. Occupied slots carry only the pet name
and service names, never customer contact details.
"""

from rest_framework import serializers


class AvailabilityQuerySerializer(serializers.Serializer):
    date = serializers.DateField()


class TimeSlotSerializer(serializers.Serializer):
    time = serializers.TimeField(source='start', format='%H:%M')
    end_time = serializers.TimeField(source='end', format='%H:%M')
    available = serializers.BooleanField()
    appointment = serializers.SerializerMethodField()

    def get_appointment(self, obj):
        if obj.occupant is None:
            return None
        return {
            'pet_name': obj.occupant.pet_name,
            'services': list(obj.occupant.service_names),
        }


class DayAvailabilitySerializer(serializers.Serializer):
    date = serializers.DateField()
    closed = serializers.BooleanField()
    slots = TimeSlotSerializer(many=True)
