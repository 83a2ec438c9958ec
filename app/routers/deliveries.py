# app/routers/deliveries.py
"""
Delivery endpoints: creation, listings and the rider-driven lifecycle
(accept → transporting → finish, or cancel).
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.address import AddressOut
from app.schemas.delivery import (
    DeliveryCreate, DeliveryListRequest, AcceptRequest, TransportingRequest, FinishRequest,
    CancelRequest, DeliveryOut, DeliveryDetailOut, AssignmentOut, ProofImages, ProductInfo,
    TransitionMeta,
)
from app.schemas.rider_location import RiderLocationOut
from app.schemas.user import PhoneLookup, UserOut
from app.services import delivery_service, user_service
from app.services.delivery_service import TransitionResult

router = APIRouter()


def _transition_body(result: TransitionResult, message: str) -> dict:
    delivery, assignment = result.delivery, result.assignment
    body = {
        "ok": True,
        "message": message,
        "delivery_id": delivery.delivery_id,
        "assi_id": assignment.assi_id if assignment else None,
        "rider_id": assignment.rider_id if assignment else None,
        "delivery": DeliveryOut.model_validate(delivery),
        "assignment": AssignmentOut.model_validate(assignment) if assignment else None,
        "proof_images": ProofImages(
            picture_status2=assignment.picture_status2 if assignment else None,
            picture_status3=assignment.picture_status3 if assignment else None,
        ),
        "product": ProductInfo(
            name_product=delivery.name_product,
            detail_product=delivery.detail_product,
            picture_product=delivery.picture_product,
            amount=delivery.amount,
            phone_receiver=delivery.phone_receiver,
        ),
        "meta": TransitionMeta(
            status_delivery=delivery.status,
            user_id_sender=delivery.user_id_sender,
            user_id_receiver=delivery.user_id_receiver,
            address_id_sender=delivery.address_id_sender,
            address_id_receiver=delivery.address_id_receiver,
            delivery_updated_at=delivery.updated_at,
            assignment_updated_at=assignment.updated_at if assignment else None,
        ),
    }
    if result.location is not None:
        body["rider_location"] = RiderLocationOut.model_validate(result.location)
    return body


@router.post("/delivery/search-receiver", summary="Find a receiver and their addresses by phone")
def search_receiver(body: PhoneLookup, db: Session = Depends(get_db)):
    user, addresses = user_service.search_receiver(db, body.phone)
    receiver = UserOut.model_validate(user).model_dump()
    receiver["addresses"] = [AddressOut.model_validate(a) for a in addresses]
    return {"receiver": receiver}


@router.post("/delivery/create", status_code=status.HTTP_201_CREATED, summary="Create a delivery (status=waiting)")
def create_delivery(body: DeliveryCreate, db: Session = Depends(get_db)):
    delivery = delivery_service.create_delivery(db, body)
    return {"ok": True, "delivery": DeliveryOut.model_validate(delivery)}


@router.post("/delivery/list-by-user", summary="Deliveries sent by a user")
def list_by_user(body: DeliveryListRequest, db: Session = Depends(get_db)):
    items = delivery_service.list_deliveries_by_sender(db, body.user_id_sender)
    deliveries = [DeliveryOut.model_validate(d) for d in items]
    return {"count": len(deliveries), "deliveries": deliveries}


@router.get("/deliveries/waiting", response_model=list[DeliveryOut], summary="Jobs open for riders")
def list_waiting(db: Session = Depends(get_db)):
    return delivery_service.list_waiting_deliveries(db)


@router.get("/delivery/{delivery_id}", response_model=DeliveryDetailOut)
def get_delivery(delivery_id: int, db: Session = Depends(get_db)):
    detail = delivery_service.get_delivery_detail(db, delivery_id)
    out = DeliveryOut.model_validate(detail["delivery"]).model_dump()
    return DeliveryDetailOut(
        **out,
        address_sender=AddressOut.model_validate(detail["address_sender"]) if detail["address_sender"] else None,
        address_receiver=AddressOut.model_validate(detail["address_receiver"]) if detail["address_receiver"] else None,
    )


@router.get("/delivery/{delivery_id}/assignments", response_model=list[AssignmentOut],
            summary="Audit trail of riders who handled a delivery")
def list_assignments(delivery_id: int, db: Session = Depends(get_db)):
    delivery_service.get_delivery(db, delivery_id)
    return delivery_service.list_assignments(db, delivery_id)


@router.post("/deliveries/accept", summary="Rider accepts a waiting delivery")
def accept_delivery(body: AcceptRequest, db: Session = Depends(get_db)):
    result = delivery_service.accept_delivery(db, body.delivery_id, body.rider_id, body.rider_lat, body.rider_lng)
    return _transition_body(result, "Delivery accepted and rider_location saved")


@router.post("/deliveries/update-status-accept", summary="Pickup confirmed → transporting")
def mark_transporting(body: TransportingRequest, db: Session = Depends(get_db)):
    result = delivery_service.mark_transporting(
        db, body.delivery_id, body.rider_id, body.picture_status2, body.rider_lat, body.rider_lng)
    return _transition_body(result, "Assignment moved to transporting and rider location updated")


@router.post("/deliveries/update-status-finish", summary="Drop-off confirmed → finish")
def mark_finish(body: FinishRequest, db: Session = Depends(get_db)):
    result = delivery_service.mark_finish(db, body.delivery_id, body.picture_status3, body.rider_id)
    return _transition_body(result, "Status updated to finish")


@router.post("/deliveries/cancel", summary="Cancel a delivery that has not finished")
def cancel_delivery(body: CancelRequest, db: Session = Depends(get_db)):
    result = delivery_service.cancel_delivery(db, body.delivery_id, body.user_id)
    return _transition_body(result, "Delivery cancelled")
