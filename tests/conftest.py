# tests/conftest.py
"""Shared fixtures: a throwaway SQLite database per test, sessions, an API client and seed data."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("DATABASE_URL", "sqlite://")

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.database import build_engine, create_tables, get_db
from app.schemas.address import AddressCreate
from app.schemas.delivery import DeliveryCreate
from app.schemas.user import UserRegister, RiderRegister
from app.services.address_service import create_address
from app.services.delivery_service import create_delivery
from app.services.user_service import register_user, register_rider


@pytest.fixture
def engine(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'delivery.db'}")
    create_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    from app.main import app

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seed(db):
    """Sender, receiver (each with one address) and two riders."""
    sender = register_user(db, UserRegister(name="Sender", phone="0810000001", password="pw"))
    receiver = register_user(db, UserRegister(name="Receiver", phone="0810000002", password="pw"))
    rider, _ = register_rider(db, RiderRegister(name="Rider One", phone="0820000001", password="pw",
                                                plate_number="1AB-1234", car_type="motorbike"))
    rider2, _ = register_rider(db, RiderRegister(name="Rider Two", phone="0820000002", password="pw",
                                                 plate_number="2CD-5678", car_type="motorbike"))
    addr_sender = create_address(db, AddressCreate(user_id=sender.user_id, address="Sender home",
                                                   lat=13.7563, lng=100.5018))
    addr_receiver = create_address(db, AddressCreate(user_id=receiver.user_id, address="Receiver office",
                                                     lat=13.7367, lng=100.5231))
    return SimpleNamespace(
        sender=sender.user_id,
        receiver=receiver.user_id,
        rider=rider.user_id,
        rider2=rider2.user_id,
        addr_sender=addr_sender.address_id,
        addr_receiver=addr_receiver.address_id,
    )


@pytest.fixture
def make_delivery(db, seed):
    def _make(**overrides) -> int:
        fields = dict(
            user_id_sender=seed.sender,
            user_id_receiver=seed.receiver,
            address_id_sender=seed.addr_sender,
            address_id_receiver=seed.addr_receiver,
            phone_receiver="0810000002",
            name_product="Iphone 10",
            detail_product="black 128GB",
            amount=1,
        )
        fields.update(overrides)
        return create_delivery(db, DeliveryCreate(**fields)).delivery_id
    return _make
