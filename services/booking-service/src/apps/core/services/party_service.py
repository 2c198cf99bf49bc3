# services/booking-service/src/apps/core/services/party_service.py
"""
Party Service

Identity resolution for customers and pets, plus the administrative
operations that are allowed to change them.
"""

import logging
from typing import Optional

from django.db import transaction, IntegrityError
from django.db.models import Q, QuerySet

from apps.core.models import Customer, Pet, Appointment
from apps.core.events import EventPublisher, EventType
from shared.common.utils import mask_email
from .exceptions import ValidationError, NotFoundError, translate_database_errors

logger = logging.getLogger(__name__)


class PartyService:
    """
    Service for the party registry.

    Handles:
    - Resolve-or-create of customers by e-mail
    - Resolve-or-create of pets by (name, breed)
    - Administrative customer updates and pet merges
    """

    CUSTOMER_UPDATABLE_FIELDS = (
        'email',
        'first_name',
        'last_name',
        'phone',
        'address',
        'emergency_contact',
        'marketing_consent',
    )

    def __init__(self, publisher: EventPublisher = None):
        self.publisher = publisher or EventPublisher()

    # ==========================================================================
    # Resolution
    # ==========================================================================

    @translate_database_errors('party.resolve_customer')
    def resolve_customer(
        self,
        email: str,
        first_name: str,
        last_name: str,
        phone: str,
        address: str = '',
        emergency_contact: str = '',
        marketing_consent: bool = False,
    ) -> Customer:
        """
        Return the customer owning `email`, creating one if absent.

        An existing customer is returned unchanged; the other arguments
        only seed a new record.
        """
        normalized = Customer.normalize_email(email)

        customer = Customer.objects.filter(email=normalized).first()
        if customer is not None:
            return customer

        try:
            with transaction.atomic():
                customer = Customer.objects.create(
                    email=normalized,
                    first_name=first_name,
                    last_name=last_name,
                    phone=phone,
                    address=address or '',
                    emergency_contact=emergency_contact or '',
                    marketing_consent=marketing_consent,
                )
        except IntegrityError:
            # Lost a race with a concurrent first booking for this e-mail
            return Customer.objects.get(email=normalized)

        logger.info(f"Customer created: {customer.id} ({mask_email(normalized)})")
        return customer

    @translate_database_errors('party.resolve_pet')
    def resolve_pet(
        self,
        customer: Customer,
        name: str,
        breed: str,
        size: Optional[str] = None,
        notes: str = '',
    ) -> Pet:
        """
        Return the customer's pet with exactly this name and breed.

        A new pet is created when there is no exact match.
        """
        pet = (
            Pet.objects
            .filter(customer=customer, name=name, breed=breed)
            .order_by('created_at')
            .first()
        )
        if pet is not None:
            return pet

        pet = Pet.objects.create(
            customer=customer,
            name=name,
            breed=breed,
            size=size or Pet.Size.MEDIUM,
            notes=notes or '',
        )
        logger.info(f"Pet created: {pet.id} for customer {customer.id}")
        return pet

    # ==========================================================================
    # Lookup
    # ==========================================================================

    @translate_database_errors('party.get_customer')
    def get_customer(self, customer_id) -> Customer:
        try:
            return Customer.objects.prefetch_related('pets').get(id=customer_id)
        except Customer.DoesNotExist:
            raise NotFoundError('Customer', customer_id)

    def list_customers(self, search: str = None) -> QuerySet:
        """Customers, optionally filtered by name or e-mail."""
        queryset = Customer.objects.prefetch_related('pets')
        if search:
            queryset = queryset.filter(
                Q(first_name__icontains=search) |
                Q(last_name__icontains=search) |
                Q(email__icontains=search)
            )
        return queryset

    # ==========================================================================
    # Administrative changes
    # ==========================================================================

    @translate_database_errors('party.update_customer')
    @transaction.atomic
    def update_customer(self, customer_id, **fields) -> Customer:
        """Explicit administrative update of a customer's details."""
        unknown = sorted(set(fields) - set(self.CUSTOMER_UPDATABLE_FIELDS))
        if unknown:
            raise ValidationError(
                errors={name: ["This field cannot be updated."] for name in unknown}
            )

        try:
            customer = Customer.objects.select_for_update().get(id=customer_id)
        except Customer.DoesNotExist:
            raise NotFoundError('Customer', customer_id)

        if 'email' in fields:
            fields['email'] = Customer.normalize_email(fields['email'])
            taken = (
                Customer.objects
                .filter(email=fields['email'])
                .exclude(id=customer.id)
                .exists()
            )
            if taken:
                raise ValidationError(
                    "Another customer already uses this e-mail address.",
                    field='email'
                )

        for name, value in fields.items():
            setattr(customer, name, value)
        customer.save()

        logger.info(f"Customer updated: {customer.id} fields={sorted(fields)}")
        return customer

    @translate_database_errors('party.merge_pets')
    @transaction.atomic
    def merge_pets(self, source_pet_id, target_pet_id) -> Pet:
        """
        Fold one pet record into another of the same customer.

        Appointments move to the target and the source record is
        deleted. Source notes are appended to the target's notes.
        """
        if str(source_pet_id) == str(target_pet_id):
            raise ValidationError("Cannot merge a pet into itself.", field='target_pet_id')

        pets = {
            str(pet.id): pet
            for pet in Pet.objects.select_for_update().filter(id__in=[source_pet_id, target_pet_id])
        }
        source = pets.get(str(source_pet_id))
        target = pets.get(str(target_pet_id))
        if source is None:
            raise NotFoundError('Pet', source_pet_id)
        if target is None:
            raise NotFoundError('Pet', target_pet_id)

        if source.customer_id != target.customer_id:
            raise ValidationError(
                "Pets belong to different customers.",
                field='target_pet_id'
            )

        moved = Appointment.objects.filter(pet=source).update(pet=target)

        if source.notes:
            target.notes = f"{target.notes}\n{source.notes}".strip()
            target.save(update_fields=['notes', 'updated_at'])

        source_id = source.id
        source.delete()

        logger.info(
            f"Pet {source_id} merged into {target.id}, {moved} appointment(s) moved"
        )

        payload = {
            'customer_id': target.customer_id,
            'source_pet_id': source_id,
            'target_pet_id': target.id,
            'appointments_moved': moved,
        }
        transaction.on_commit(
            lambda: self.publisher.publish(EventType.PETS_MERGED, payload)
        )
        return target
