# app/schemas/delivery.py
"""Request/response shapes for the delivery lifecycle endpoints."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from app.schemas.address import AddressOut


class DeliveryCreate(BaseModel):
    user_id_sender: int
    user_id_receiver: int
    address_id_sender: int
    address_id_receiver: int
    phone_receiver: Optional[str] = None
    name_product: str = ""
    detail_product: str = ""
    picture_product: Optional[str] = None
    amount: int = Field(1, ge=1)
    picture_status1: Optional[str] = None


class DeliveryListRequest(BaseModel):
    user_id_sender: int


class AcceptRequest(BaseModel):
    delivery_id: int
    rider_id: int
    rider_lat: float = Field(..., ge=-90, le=90)
    rider_lng: float = Field(..., ge=-180, le=180)


class TransportingRequest(BaseModel):
    delivery_id: int
    rider_id: int
    picture_status2: str
    rider_lat: float = Field(..., ge=-90, le=90)
    rider_lng: float = Field(..., ge=-180, le=180)


class FinishRequest(BaseModel):
    delivery_id: int
    picture_status3: Optional[str] = None
    rider_id: Optional[int] = None      # checked against the assignment when given


class CancelRequest(BaseModel):
    delivery_id: int
    user_id: int


class DeliveryOut(BaseModel):
    delivery_id: int
    user_id_sender: int
    user_id_receiver: int
    phone_receiver: Optional[str]
    address_id_sender: int
    address_id_receiver: int
    name_product: str
    detail_product: str
    picture_product: Optional[str]
    amount: int
    picture_status1: Optional[str]
    status: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class DeliveryDetailOut(DeliveryOut):
    address_sender: Optional[AddressOut] = None
    address_receiver: Optional[AddressOut] = None


class AssignmentOut(BaseModel):
    assi_id: int
    delivery_id: int
    rider_id: int
    status: str
    picture_status2: Optional[str]
    picture_status3: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class ProofImages(BaseModel):
    picture_status2: Optional[str] = None    # pickup
    picture_status3: Optional[str] = None    # drop-off


class ProductInfo(BaseModel):
    name_product: Optional[str] = None
    detail_product: Optional[str] = None
    picture_product: Optional[str] = None
    amount: Optional[int] = None
    phone_receiver: Optional[str] = None


class TransitionMeta(BaseModel):
    status_delivery: str
    user_id_sender: int
    user_id_receiver: int
    address_id_sender: int
    address_id_receiver: int
    delivery_updated_at: Optional[datetime] = None
    assignment_updated_at: Optional[datetime] = None
