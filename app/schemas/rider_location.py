# app/schemas/rider_location.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class LocationUpdate(BaseModel):
    rider_id: int
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class RiderLocationOut(BaseModel):
    rider_id: int
    lat: float
    lng: float
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class LocationUpdateOut(BaseModel):
    ok: bool = True
    updated: bool
    skipped: bool
    rider_location: RiderLocationOut


class RiderOverviewOut(BaseModel):
    rider_id: int
    rider_lat: Optional[float]
    rider_lng: Optional[float]
    receiver_lat: Optional[float]
    receiver_lng: Optional[float]
    delivery_id: Optional[int]
    updated_at: Optional[datetime]
