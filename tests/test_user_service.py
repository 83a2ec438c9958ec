# tests/test_user_service.py
"""Tests for user, rider-car and address book services."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from app.exceptions import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError, BadRequestError
from app.schemas.address import AddressCreate
from app.schemas.user import UserRegister, UserUpdate
from app.services import address_service, user_service
from app.services.sequence_service import allocator


class TestUsers:
    def test_seeded_ids_and_roles(self, db, seed):
        assert (seed.sender, seed.receiver, seed.rider, seed.rider2) == (1, 2, 3, 4)
        assert user_service.get_user(db, seed.sender).role == 0
        assert user_service.get_user(db, seed.rider).role == 1

    def test_rider_gets_a_car(self, db, seed):
        car = user_service.get_rider_car(db, seed.rider2)
        assert car.car_id == 2
        assert car.plate_number == "2CD-5678"
        with pytest.raises(NotFoundError):
            user_service.get_rider_car(db, seed.sender)

    def test_duplicate_phone_is_conflict(self, db, seed):
        with pytest.raises(ConflictError) as exc:
            user_service.register_user(db, UserRegister(name="Copy", phone="0810000001", password="x"))
        assert exc.value.payload == {"user_id": seed.sender}
        assert allocator.current(db, "user_seq") == 4

    def test_blank_name_rejected(self, db):
        with pytest.raises(BadRequestError):
            user_service.register_user(db, UserRegister(name="", phone="0899999999", password="x"))

    def test_login(self, db, seed):
        assert user_service.login(db, "0810000001", "pw").user_id == seed.sender
        with pytest.raises(UnauthorizedError):
            user_service.login(db, "0810000001", "wrong")
        with pytest.raises(UnauthorizedError):
            user_service.login(db, "0000000000", "pw")

    def test_search_receiver_returns_addresses(self, db, seed):
        user, addresses = user_service.search_receiver(db, "0810000002")
        assert user.user_id == seed.receiver
        assert [a.address_id for a in addresses] == [seed.addr_receiver]
        with pytest.raises(NotFoundError, match="receiver not found"):
            user_service.search_receiver(db, "0000000000")

    def test_update_user(self, db, seed):
        user = user_service.update_user(db, seed.sender, UserUpdate(name="Renamed"))
        assert user.name == "Renamed"
        assert user.phone == "0810000001"

    def test_update_to_taken_phone_is_conflict(self, db, seed):
        with pytest.raises(ConflictError):
            user_service.update_user(db, seed.sender, UserUpdate(phone="0810000002"))

    def test_empty_update_rejected(self, db, seed):
        with pytest.raises(BadRequestError):
            user_service.update_user(db, seed.sender, UserUpdate())

    def test_delete_unreferenced_user(self, db, seed):
        user_service.delete_user(db, seed.rider2)
        with pytest.raises(NotFoundError):
            user_service.get_user(db, seed.rider2)
        with pytest.raises(NotFoundError):
            user_service.get_rider_car(db, seed.rider2)

    def test_delete_user_in_delivery_is_conflict(self, db, seed, make_delivery):
        make_delivery()
        with pytest.raises(ConflictError):
            user_service.delete_user(db, seed.sender)


class TestAddresses:
    def test_list_addresses(self, db, seed):
        address_service.create_address(db, AddressCreate(user_id=seed.sender, address="Second", lat=1.0, lng=2.0))
        addresses = address_service.list_addresses(db, seed.sender)
        assert [a.address for a in addresses] == ["Sender home", "Second"]

    def test_address_for_unknown_user(self, db, seed):
        with pytest.raises(NotFoundError):
            address_service.create_address(db, AddressCreate(user_id=999, address="Nowhere"))

    def test_only_owner_can_delete(self, db, seed):
        with pytest.raises(ForbiddenError):
            address_service.delete_address(db, seed.receiver, seed.addr_sender)
        address_service.delete_address(db, seed.sender, seed.addr_sender)
        with pytest.raises(NotFoundError):
            address_service.get_address(db, seed.addr_sender)

    def test_address_in_use_cannot_be_deleted(self, db, seed, make_delivery):
        make_delivery()
        with pytest.raises(ConflictError):
            address_service.delete_address(db, seed.receiver, seed.addr_receiver)
