# services/booking-service/src/apps/api/views/customer_views.py
"""
Customer API Views

Operator access to the party registry.
"""

import logging

from rest_framework import viewsets, mixins, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAdminUser

from apps.core.services import PartyService, ValidationError
from apps.api.serializers import (
    CustomerSerializer,
    CustomerUpdateSerializer,
    PetMergeSerializer,
    PetSerializer,
)

logger = logging.getLogger(__name__)


class CustomerViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for customers.

    List supports `?search=` across name and e-mail.
    """

    serializer_class = CustomerSerializer
    lookup_value_regex = r'\d+'
    permission_classes = [IsAdminUser]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ['last_name', 'first_name', 'email', 'created_at']
    ordering = ['last_name', 'first_name']

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.party_service = PartyService()

    def get_queryset(self):
        return self.party_service.list_customers(
            search=self.request.query_params.get('search')
        )

    def retrieve(self, request, *args, **kwargs):
        customer = self.party_service.get_customer(kwargs['pk'])
        return Response(CustomerSerializer(customer).data)

    def partial_update(self, request, *args, **kwargs):
        """Administrative update of contact details."""
        serializer = CustomerUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        customer = self.party_service.update_customer(kwargs['pk'], **serializer.validated_data)
        customer = self.party_service.get_customer(customer.id)
        return Response(CustomerSerializer(customer).data)

    @action(detail=True, methods=['post'], url_path='merge-pets')
    def merge_pets(self, request, pk=None):
        """Fold a duplicate pet record into another of this customer's pets."""
        serializer = PetMergeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        customer = self.party_service.get_customer(pk)
        owned = {pet.id for pet in customer.pets.all()}
        source_id = serializer.validated_data['source_pet_id']
        target_id = serializer.validated_data['target_pet_id']
        if source_id not in owned or target_id not in owned:
            raise ValidationError(
                "Both pets must belong to this customer.",
                field='source_pet_id' if source_id not in owned else 'target_pet_id'
            )

        pet = self.party_service.merge_pets(source_id, target_id)
        return Response(PetSerializer(pet).data)
