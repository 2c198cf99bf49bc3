# services/booking-service/src/apps/api/serializers/catalog_serializers.py
"""
Catalog Serializers
"""

from rest_framework import serializers

from apps.core.models import Service


class ServiceSerializer(serializers.ModelSerializer):
    category_display = serializers.CharField(source='get_category_display', read_only=True)

    class Meta:
        model = Service
        fields = [
            'code', 'name', 'description', 'duration_minutes', 'price',
            'category', 'category_display', 'is_active',
        ]
        read_only_fields = fields
