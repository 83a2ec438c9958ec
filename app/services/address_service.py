# app/services/address_service.py
"""Address book CRUD. Only the owning user may delete an entry."""

from sqlalchemy.orm import Session

from app.database import run_transaction
from app.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from app.models.address import Address
from app.models.delivery import Delivery
from app.models.user import User
from app.schemas.address import AddressCreate
from app.services.sequence_service import allocator, ADDRESS_SEQ
from app.utils.logger import get_logger

logger = get_logger(__name__)


def create_address(db: Session, body: AddressCreate) -> Address:
    if body.user_id is None or not body.address:
        raise BadRequestError("user_id and address are required")

    def _work(s: Session) -> Address:
        if s.get(User, body.user_id) is None:
            raise NotFoundError("user not found")
        address = Address(
            address_id=allocator.next_id(s, ADDRESS_SEQ),
            user_id=body.user_id,
            address=body.address,
            lat=body.lat,
            lng=body.lng,
        )
        s.add(address)
        return address

    address = run_transaction(db, _work)
    logger.info(f"[ADDRESS] #{address.address_id} added for user {body.user_id}")
    return address


def get_address(db: Session, address_id: int) -> Address:
    address = db.get(Address, address_id)
    if address is None:
        raise NotFoundError("address not found")
    return address


def list_addresses(db: Session, user_id: int) -> list:
    return (
        db.query(Address)
        .filter(Address.user_id == user_id)
        .order_by(Address.address_id)
        .all()
    )


def delete_address(db: Session, user_id: int, address_id: int):
    if user_id is None or address_id is None:
        raise BadRequestError("user_id and address_id are required")

    def _work(s: Session):
        address = s.get(Address, address_id)
        if address is None:
            raise NotFoundError("address not found")
        if address.user_id != user_id:
            raise ForbiddenError("not authorized to delete this address")
        in_use = s.query(Delivery).filter(
            (Delivery.address_id_sender == address_id) | (Delivery.address_id_receiver == address_id)
        ).first()
        if in_use:
            raise ConflictError("address is used by a delivery and cannot be deleted")
        s.delete(address)

    run_transaction(db, _work)
    logger.info(f"[ADDRESS] #{address_id} deleted by user {user_id}")
