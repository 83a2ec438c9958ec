# app/routers/riders.py
"""Rider GPS updates and the rider → destination overview."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.rider_location import LocationUpdate, LocationUpdateOut, RiderLocationOut, RiderOverviewOut
from app.services import delivery_service, location_service

router = APIRouter()


@router.post("/rider/location/update", response_model=LocationUpdateOut, summary="Report rider position")
def update_location(body: LocationUpdate, db: Session = Depends(get_db)):
    """Pings within LOCATION_DEDUP_METERS of the stored point are acknowledged but not written."""
    result = location_service.upsert_rider_location(db, body.rider_id, body.lat, body.lng)
    return LocationUpdateOut(
        updated=result.updated,
        skipped=result.skipped,
        rider_location=RiderLocationOut.model_validate(result.location),
    )


@router.get("/riders/overview/{rider_id}", response_model=RiderOverviewOut,
            summary="Rider position + destination of the current job")
def rider_overview(rider_id: int, db: Session = Depends(get_db)):
    return delivery_service.rider_overview(db, rider_id)
