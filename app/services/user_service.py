# app/services/user_service.py
"""
User and rider-car CRUD.
Thin accessors around the sequence allocator. Passwords are stored and
compared as given. This is a placeholder, not credential security.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.database import run_transaction
from app.exceptions import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from app.models.address import Address
from app.models.assignment import DeliveryAssignment
from app.models.delivery import Delivery
from app.models.rider_car import RiderCar
from app.models.rider_location import RiderLocation
from app.models.user import User, ROLE_CUSTOMER, ROLE_RIDER
from app.schemas.user import UserRegister, RiderRegister, UserUpdate
from app.services.sequence_service import allocator, USER_SEQ, RIDER_SEQ
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _check_phone_free(db: Session, phone: str, exclude_user_id: Optional[int] = None):
    q = db.query(User).filter(User.phone == phone)
    if exclude_user_id is not None:
        q = q.filter(User.user_id != exclude_user_id)
    existing = q.first()
    if existing:
        raise ConflictError("phone already exists", payload={"user_id": existing.user_id})


def _insert_user(db: Session, body: UserRegister, role: int) -> User:
    _check_phone_free(db, body.phone)
    user = User(
        user_id=allocator.next_id(db, USER_SEQ),
        name=body.name,
        password=body.password,
        phone=body.phone,
        picture=body.picture,
        role=role,
        created_at=datetime.utcnow(),
    )
    db.add(user)
    return user


def _require_identity(body: UserRegister):
    if not body.name or not body.password or not body.phone:
        raise BadRequestError("name, password, phone are required")


def register_user(db: Session, body: UserRegister, role: int = ROLE_CUSTOMER) -> User:
    _require_identity(body)
    if role not in (ROLE_CUSTOMER, ROLE_RIDER):
        raise BadRequestError("role must be 0 or 1")
    user = run_transaction(db, lambda s: _insert_user(s, body, role))
    logger.info(f"[USER] registered #{user.user_id} role={role}")
    return user


def register_rider(db: Session, body: RiderRegister):
    """Rider user (role 1) and their car, created together."""
    _require_identity(body)
    if not body.plate_number or not body.car_type:
        raise BadRequestError("plate_number, car_type are required")

    def _work(s: Session):
        user = _insert_user(s, body, ROLE_RIDER)
        car = RiderCar(
            car_id=allocator.next_id(s, RIDER_SEQ),
            user_id=user.user_id,
            plate_number=body.plate_number,
            car_type=body.car_type,
            image_car=body.image_car,
        )
        s.add(car)
        return user, car

    user, car = run_transaction(db, _work)
    logger.info(f"[USER] registered rider #{user.user_id} car={car.plate_number}")
    return user, car


def login(db: Session, phone: str, password: str) -> User:
    if not phone or not password:
        raise BadRequestError("phone and password are required")
    user = db.query(User).filter(User.phone == phone).first()
    if user is None or user.password != password:
        raise UnauthorizedError("invalid credentials")
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("user not found")
    return user


def list_users(db: Session) -> list:
    return db.query(User).order_by(User.user_id).all()


def get_user_by_phone(db: Session, phone: str) -> User:
    if not phone:
        raise BadRequestError("phone is required")
    user = db.query(User).filter(User.phone == phone).first()
    if user is None:
        raise NotFoundError("user not found")
    return user


def search_receiver(db: Session, phone: str):
    """Receiver lookup for the create-delivery screen: the user plus their addresses."""
    try:
        user = get_user_by_phone(db, phone)
    except NotFoundError:
        raise NotFoundError("receiver not found")
    addresses = (
        db.query(Address)
        .filter(Address.user_id == user.user_id)
        .order_by(Address.address_id)
        .all()
    )
    return user, addresses


def update_user(db: Session, user_id: int, patch: UserUpdate) -> User:
    changes = patch.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise BadRequestError("nothing to update")

    def _work(s: Session) -> User:
        user = s.get(User, user_id)
        if user is None:
            raise NotFoundError("user not found")
        if "phone" in changes:
            _check_phone_free(s, changes["phone"], exclude_user_id=user_id)
        for field, value in changes.items():
            setattr(user, field, value)
        return user

    user = run_transaction(db, _work)
    logger.info(f"[USER] #{user_id} updated fields={sorted(changes)}")
    return user


def delete_user(db: Session, user_id: int):
    """Removes the user with their addresses, car and location. Refused once they took part in a delivery."""

    def _work(s: Session):
        user = s.get(User, user_id)
        if user is None:
            raise NotFoundError("user not found")
        in_delivery = s.query(Delivery).filter(
            (Delivery.user_id_sender == user_id) | (Delivery.user_id_receiver == user_id)
        ).first()
        in_assignment = s.query(DeliveryAssignment).filter(DeliveryAssignment.rider_id == user_id).first()
        if in_delivery or in_assignment:
            raise ConflictError("user is referenced by deliveries and cannot be deleted")
        s.query(Address).filter(Address.user_id == user_id).delete()
        s.query(RiderCar).filter(RiderCar.user_id == user_id).delete()
        s.query(RiderLocation).filter(RiderLocation.rider_id == user_id).delete()
        s.delete(user)

    run_transaction(db, _work)
    logger.info(f"[USER] #{user_id} deleted")


def get_rider_car(db: Session, user_id: int) -> RiderCar:
    car = db.query(RiderCar).filter(RiderCar.user_id == user_id).first()
    if car is None:
        raise NotFoundError("rider_car not found")
    return car
