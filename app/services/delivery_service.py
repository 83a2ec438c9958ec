# app/services/delivery_service.py
"""
Delivery Lifecycle Engine.

    waiting ──accept──▶ accept ──pickup──▶ transporting ──drop-off──▶ finish
       └──────────────┴──────────────────────┴──────cancel──────────▶ cancel

Every transition is one run_transaction() unit: the Delivery row, its
Assignment row and the rider's location commit together or not at all.
The Delivery and Assignment rows are versioned, so of two riders racing to
accept the same job only one commit succeeds; the other is retried, re-reads
the delivery, finds it no longer `waiting` and gets InvalidStateError.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.database import run_transaction
from app.exceptions import BadRequestError, ForbiddenError, InvalidStateError, NotFoundError
from app.models.address import Address
from app.models.assignment import DeliveryAssignment
from app.models.delivery import (
    Delivery, STATUS_WAITING, STATUS_ACCEPT, STATUS_TRANSPORTING, STATUS_FINISH,
    STATUS_CANCEL, TERMINAL_STATUSES, ACTIVE_STATUSES,
)
from app.models.rider_location import RiderLocation
from app.models.user import User
from app.schemas.delivery import DeliveryCreate
from app.services.location_service import apply_location, validate_coordinates
from app.services.sequence_service import allocator, DELIVERY_SEQ, ASSIGNMENT_SEQ
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class TransitionResult:
    delivery: Delivery
    assignment: Optional[DeliveryAssignment]
    location: Optional[RiderLocation] = None


def _active_assignment(db: Session, delivery_id: int) -> Optional[DeliveryAssignment]:
    return (
        db.query(DeliveryAssignment)
        .filter(
            DeliveryAssignment.delivery_id == delivery_id,
            DeliveryAssignment.status.in_(ACTIVE_STATUSES),
        )
        .order_by(DeliveryAssignment.assi_id.desc())
        .first()
    )


# ── Create ──────────────────────────────────────────────────────────────────

def create_delivery(db: Session, body: DeliveryCreate) -> Delivery:
    required = ("user_id_sender", "user_id_receiver", "address_id_sender", "address_id_receiver")
    if any(getattr(body, f) is None for f in required):
        raise BadRequestError(f"{', '.join(required)} are required")

    def _work(s: Session) -> Delivery:
        if s.get(User, body.user_id_sender) is None:
            raise NotFoundError("sender not found")
        if s.get(User, body.user_id_receiver) is None:
            raise NotFoundError("receiver not found")
        if s.get(Address, body.address_id_sender) is None:
            raise NotFoundError("sender address not found")
        if s.get(Address, body.address_id_receiver) is None:
            raise NotFoundError("receiver address not found")

        now = datetime.utcnow()
        delivery = Delivery(
            delivery_id=allocator.next_id(s, DELIVERY_SEQ),
            user_id_sender=body.user_id_sender,
            user_id_receiver=body.user_id_receiver,
            phone_receiver=body.phone_receiver,
            address_id_sender=body.address_id_sender,
            address_id_receiver=body.address_id_receiver,
            name_product=body.name_product or "",
            detail_product=body.detail_product or "",
            picture_product=body.picture_product,
            amount=body.amount,
            picture_status1=body.picture_status1,
            status=STATUS_WAITING,
            created_at=now,
            updated_at=now,
        )
        s.add(delivery)
        return delivery

    delivery = run_transaction(db, _work)
    logger.info(f"[DELIVERY] #{delivery.delivery_id} created "
                f"sender={delivery.user_id_sender} receiver={delivery.user_id_receiver}")
    return delivery


# ── Reads ───────────────────────────────────────────────────────────────────

def get_delivery(db: Session, delivery_id: int) -> Delivery:
    delivery = db.get(Delivery, delivery_id)
    if delivery is None:
        raise NotFoundError("delivery not found")
    return delivery


def get_delivery_detail(db: Session, delivery_id: int) -> dict:
    """Delivery with both addresses resolved. Missing addresses come back as None."""
    delivery = get_delivery(db, delivery_id)
    return {
        "delivery": delivery,
        "address_sender": db.get(Address, delivery.address_id_sender),
        "address_receiver": db.get(Address, delivery.address_id_receiver),
    }


def list_deliveries_by_sender(db: Session, user_id_sender: int) -> list:
    if user_id_sender is None:
        raise BadRequestError("user_id_sender is required")
    return (
        db.query(Delivery)
        .filter(Delivery.user_id_sender == user_id_sender)
        .order_by(Delivery.delivery_id)
        .all()
    )


def list_waiting_deliveries(db: Session) -> list:
    return (
        db.query(Delivery)
        .filter(Delivery.status == STATUS_WAITING)
        .order_by(Delivery.delivery_id)
        .all()
    )


def list_assignments(db: Session, delivery_id: int) -> list:
    return (
        db.query(DeliveryAssignment)
        .filter(DeliveryAssignment.delivery_id == delivery_id)
        .order_by(DeliveryAssignment.assi_id)
        .all()
    )


# ── Transitions ─────────────────────────────────────────────────────────────

def accept_delivery(db: Session, delivery_id: int, rider_id: int,
                    rider_lat: float, rider_lng: float) -> TransitionResult:
    """waiting → accept. Creates the assignment and records the rider's first position."""
    if delivery_id is None or rider_id is None:
        raise BadRequestError("delivery_id, rider_id are required")
    validate_coordinates(rider_lat, rider_lng, "rider_lat", "rider_lng")

    def _work(s: Session) -> TransitionResult:
        delivery = s.get(Delivery, delivery_id)
        if delivery is None:
            raise NotFoundError("delivery not found")
        if delivery.status != STATUS_WAITING:
            raise InvalidStateError(
                f"delivery {delivery_id} already accepted or in progress (status '{delivery.status}')")
        rider = s.get(User, rider_id)
        if rider is None:
            raise NotFoundError("rider not found")
        if not rider.is_rider:
            raise ForbiddenError(f"user {rider_id} is not a rider")

        now = datetime.utcnow()
        assignment = DeliveryAssignment(
            assi_id=allocator.next_id(s, ASSIGNMENT_SEQ),
            delivery_id=delivery_id,
            rider_id=rider_id,
            status=STATUS_ACCEPT,
            created_at=now,
            updated_at=now,
        )
        s.add(assignment)
        delivery.status = STATUS_ACCEPT
        delivery.updated_at = now
        location = apply_location(s, rider_id, rider_lat, rider_lng, now)
        return TransitionResult(delivery, assignment, location)

    try:
        result = run_transaction(db, _work)
    except InvalidStateError as e:
        logger.warning(f"[ACCEPT] rider={rider_id} lost delivery #{delivery_id}: {e.message}")
        raise
    logger.info(f"[ACCEPT] delivery #{delivery_id} → rider {rider_id} (assi #{result.assignment.assi_id})")
    return result


def mark_transporting(db: Session, delivery_id: int, rider_id: int, picture_status2: str,
                      rider_lat: float, rider_lng: float) -> TransitionResult:
    """accept → transporting. Only the rider holding the assignment may do this."""
    if delivery_id is None or rider_id is None or not picture_status2:
        raise BadRequestError("delivery_id, rider_id, picture_status2 are required")
    validate_coordinates(rider_lat, rider_lng, "rider_lat", "rider_lng")

    def _work(s: Session) -> TransitionResult:
        # All reads first, then the writes
        delivery = s.get(Delivery, delivery_id)
        if delivery is None:
            raise NotFoundError("delivery not found")
        assignment = (
            s.query(DeliveryAssignment)
            .filter(
                DeliveryAssignment.delivery_id == delivery_id,
                DeliveryAssignment.rider_id == rider_id,
            )
            .order_by(DeliveryAssignment.assi_id.desc())
            .first()
        )
        if assignment is None:
            raise NotFoundError("assignment not found for this delivery/rider")
        if assignment.status != STATUS_ACCEPT or delivery.status != STATUS_ACCEPT:
            raise InvalidStateError(
                f"assignment must be in 'accept' to set transporting (is '{assignment.status}')")

        now = datetime.utcnow()
        assignment.status = STATUS_TRANSPORTING
        assignment.picture_status2 = picture_status2
        assignment.updated_at = now
        delivery.status = STATUS_TRANSPORTING
        delivery.updated_at = now
        location = apply_location(s, rider_id, rider_lat, rider_lng, now)
        return TransitionResult(delivery, assignment, location)

    result = run_transaction(db, _work)
    logger.info(f"[TRANSPORT] delivery #{delivery_id} picked up by rider {rider_id}")
    return result


def mark_finish(db: Session, delivery_id: int, picture_status3: Optional[str] = None,
                rider_id: Optional[int] = None) -> TransitionResult:
    """transporting → finish. Assignment and delivery are updated in one transaction."""
    if delivery_id is None:
        raise BadRequestError("delivery_id is required")

    def _work(s: Session) -> TransitionResult:
        delivery = s.get(Delivery, delivery_id)
        if delivery is None:
            raise NotFoundError("delivery not found")
        assignments = (
            s.query(DeliveryAssignment)
            .filter(DeliveryAssignment.delivery_id == delivery_id)
            .all()
        )
        if not assignments:
            raise NotFoundError("assignment for this delivery not found")
        assignment = next((a for a in assignments if a.status == STATUS_TRANSPORTING), None)
        if assignment is None:
            raise InvalidStateError("no assignment in 'transporting' for this delivery")
        if rider_id is not None and rider_id != assignment.rider_id:
            raise ForbiddenError("rider_id does not match assignment")

        now = datetime.utcnow()
        assignment.status = STATUS_FINISH
        if picture_status3:
            assignment.picture_status3 = picture_status3
        assignment.updated_at = now
        delivery.status = STATUS_FINISH
        delivery.updated_at = now
        return TransitionResult(delivery, assignment)

    result = run_transaction(db, _work)
    logger.info(f"[FINISH] delivery #{delivery_id} delivered by rider {result.assignment.rider_id}")
    return result


def cancel_delivery(db: Session, delivery_id: int, user_id: int) -> TransitionResult:
    """Any non-terminal state → cancel. Sender or the active rider only."""
    if delivery_id is None or user_id is None:
        raise BadRequestError("delivery_id, user_id are required")

    def _work(s: Session) -> TransitionResult:
        delivery = s.get(Delivery, delivery_id)
        if delivery is None:
            raise NotFoundError("delivery not found")
        if delivery.status in TERMINAL_STATUSES:
            raise InvalidStateError(f"delivery {delivery_id} is already '{delivery.status}'")
        assignment = _active_assignment(s, delivery_id)
        is_rider = assignment is not None and assignment.rider_id == user_id
        if user_id != delivery.user_id_sender and not is_rider:
            raise ForbiddenError("only the sender or the assigned rider can cancel")

        now = datetime.utcnow()
        if assignment is not None:
            assignment.status = STATUS_CANCEL
            assignment.updated_at = now
        delivery.status = STATUS_CANCEL
        delivery.updated_at = now
        return TransitionResult(delivery, assignment)

    result = run_transaction(db, _work)
    logger.info(f"[CANCEL] delivery #{delivery_id} cancelled by user {user_id}")
    return result


# ── Overview ────────────────────────────────────────────────────────────────

def rider_overview(db: Session, rider_id: int) -> dict:
    """
    Rider position paired with the destination of their current job.
    The current job is the active assignment with the highest assi_id.
    """
    location = db.get(RiderLocation, rider_id)
    if location is None:
        raise NotFoundError("rider location not found")

    overview = {
        "rider_id": rider_id,
        "rider_lat": location.lat,
        "rider_lng": location.lng,
        "receiver_lat": None,
        "receiver_lng": None,
        "delivery_id": None,
        "updated_at": location.updated_at,
    }

    active = (
        db.query(DeliveryAssignment)
        .filter(
            DeliveryAssignment.rider_id == rider_id,
            DeliveryAssignment.status.in_(ACTIVE_STATUSES),
        )
        .all()
    )
    latest = max(active, key=lambda a: a.assi_id, default=None)
    if latest is None:
        return overview

    overview["delivery_id"] = latest.delivery_id
    delivery = db.get(Delivery, latest.delivery_id)
    if delivery is None:
        return overview

    address = db.get(Address, delivery.address_id_receiver)
    if address is not None:
        overview["receiver_lat"] = address.lat
        overview["receiver_lng"] = address.lng
    return overview
