# services/booking-service/src/tests/unit/test_party_service.py
"""
Unit Tests for Party Service
"""

from datetime import time
from unittest.mock import MagicMock

import pytest

from apps.core.events import EventType
from apps.core.models import Appointment, Customer, Pet
from apps.core.services import NotFoundError, PartyService, ValidationError


@pytest.mark.django_db
class TestResolveCustomer:
    """Tests for customer identity resolution."""

    def setup_method(self):
        self.service = PartyService(publisher=MagicMock())

    def resolve(self, email, **kwargs):
        params = {
            'first_name': 'Jane',
            'last_name': 'Doe',
            'phone': '555-0101',
        }
        params.update(kwargs)
        return self.service.resolve_customer(email=email, **params)

    def test_creates_customer(self):
        customer = self.resolve('jane@x.com', address='1 Bark Lane')

        assert customer.pk is not None
        assert customer.email == 'jane@x.com'
        assert customer.address == '1 Bark Lane'

    def test_email_match_ignores_case(self):
        original = self.resolve('jane@x.com')

        again = self.resolve('JANE@X.com')

        assert again.id == original.id
        assert Customer.objects.count() == 1

    def test_existing_customer_not_updated(self):
        original = self.resolve('jane@x.com', phone='555-0101')

        again = self.resolve('jane@x.com', first_name='Janet', phone='555-9999')

        assert again.id == original.id
        again.refresh_from_db()
        assert again.first_name == 'Jane'
        assert again.phone == '555-0101'

    def test_lost_race_returns_winner(self, create_customer, monkeypatch):
        winner = create_customer(email='jane@x.com')
        real_filter = Customer.objects.filter
        calls = {'count': 0}

        def miss_first_lookup(*args, **kwargs):
            calls['count'] += 1
            if calls['count'] == 1:
                return Customer.objects.none()
            return real_filter(*args, **kwargs)

        monkeypatch.setattr(Customer.objects, 'filter', miss_first_lookup)

        customer = self.resolve('jane@x.com')

        assert customer.id == winner.id


@pytest.mark.django_db
class TestResolvePet:
    """Tests for pet identity resolution."""

    def setup_method(self):
        self.service = PartyService(publisher=MagicMock())

    def test_exact_match_reused(self, create_customer):
        customer = create_customer()
        first = self.service.resolve_pet(customer, name='Biscuit', breed='Beagle', size='small')

        again = self.service.resolve_pet(customer, name='Biscuit', breed='Beagle')

        assert again.id == first.id

    def test_different_breed_is_new_pet(self, create_customer):
        customer = create_customer()
        first = self.service.resolve_pet(customer, name='Biscuit', breed='Beagle')

        other = self.service.resolve_pet(customer, name='Biscuit', breed='Basset Hound')

        assert other.id != first.id
        assert customer.pets.count() == 2

    def test_same_pet_name_other_customer(self, create_customer):
        first = self.service.resolve_pet(create_customer(), name='Biscuit', breed='Beagle')

        other = self.service.resolve_pet(create_customer(), name='Biscuit', breed='Beagle')

        assert other.id != first.id

    def test_size_defaults_to_medium(self, create_customer):
        pet = self.service.resolve_pet(create_customer(), name='Mochi', breed='Shiba Inu')

        assert pet.size == Pet.Size.MEDIUM


@pytest.mark.django_db
class TestCustomerAdministration:
    """Tests for lookup and explicit updates."""

    def setup_method(self):
        self.service = PartyService(publisher=MagicMock())

    def test_get_customer(self, create_customer):
        customer = create_customer()

        assert self.service.get_customer(customer.id).id == customer.id

    def test_get_missing_customer(self):
        with pytest.raises(NotFoundError):
            self.service.get_customer(999999)

    def test_list_customers_search(self, create_customer):
        create_customer(first_name='Priya', email='priya@example.com')
        create_customer(first_name='Tom', email='tom@example.com')

        found = self.service.list_customers(search='priya')

        assert [c.first_name for c in found] == ['Priya']

    def test_update_customer(self, create_customer):
        customer = create_customer(phone='555-0100')

        updated = self.service.update_customer(
            customer.id, phone='555-0199', email='New@Example.com'
        )

        assert updated.phone == '555-0199'
        assert updated.email == 'new@example.com'

    def test_update_customer_email_taken(self, create_customer):
        create_customer(email='taken@example.com')
        customer = create_customer()

        with pytest.raises(ValidationError) as exc_info:
            self.service.update_customer(customer.id, email='TAKEN@example.com')

        assert 'email' in exc_info.value.field_errors

    def test_update_rejects_unknown_fields(self, create_customer):
        customer = create_customer()

        with pytest.raises(ValidationError) as exc_info:
            self.service.update_customer(customer.id, id=5)

        assert 'id' in exc_info.value.field_errors

    def test_update_missing_customer(self):
        with pytest.raises(NotFoundError):
            self.service.update_customer(999999, phone='555-0000')


@pytest.mark.django_db
class TestMergePets:
    """Tests for folding duplicate pets together."""

    def setup_method(self):
        self.publisher = MagicMock()
        self.service = PartyService(publisher=self.publisher)

    def test_merge_moves_appointments(
        self, create_pet, create_appointment, django_capture_on_commit_callbacks
    ):
        keep = create_pet(name='Biscuit', breed='Beagle', notes='Likes treats')
        duplicate = create_pet(
            customer=keep.customer, name='Biscuit', breed='beagle', notes='Hates nail trims'
        )
        appointment = create_appointment(pet=duplicate, time=time(9, 0))

        with django_capture_on_commit_callbacks(execute=True):
            merged = self.service.merge_pets(duplicate.id, keep.id)

        assert merged.id == keep.id
        assert not Pet.objects.filter(id=duplicate.id).exists()
        assert Appointment.objects.get(id=appointment.id).pet_id == keep.id
        assert merged.notes == 'Likes treats\nHates nail trims'

        event_type, payload = self.publisher.publish.call_args[0]
        assert event_type == EventType.PETS_MERGED
        assert payload['appointments_moved'] == 1
        assert payload['source_pet_id'] == duplicate.id

    def test_merge_into_itself(self, create_pet):
        pet = create_pet()

        with pytest.raises(ValidationError):
            self.service.merge_pets(pet.id, pet.id)

    def test_merge_across_customers(self, create_pet):
        with pytest.raises(ValidationError):
            self.service.merge_pets(create_pet().id, create_pet().id)

    def test_merge_missing_pet(self, create_pet):
        pet = create_pet()

        with pytest.raises(NotFoundError):
            self.service.merge_pets(999999, pet.id)
