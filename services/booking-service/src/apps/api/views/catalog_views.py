# services/booking-service/src/apps/api/views/catalog_views.py
"""
Catalog API Views
"""

from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny

from apps.core.services import CatalogService
from apps.api.serializers import ServiceSerializer


class ServiceCatalogView(APIView):
    """Active bookable services, in display order."""

    permission_classes = [AllowAny]

    def get(self, request):
        services = CatalogService().list_services()
        return Response(ServiceSerializer(services, many=True).data)
