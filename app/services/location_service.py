# app/services/location_service.py
"""
Rider Location Tracker.
Keeps one row per rider with the last reported coordinate. High-frequency
GPS pings that land within LOCATION_DEDUP_METERS of the stored point are
dropped without a write.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from geopy.distance import great_circle
from sqlalchemy.orm import Session

from app.config import settings
from app.database import run_transaction
from app.exceptions import BadRequestError, NotFoundError
from app.models.rider_location import RiderLocation
from app.models.user import User
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LocationUpdateResult:
    rider_id: int
    updated: bool
    skipped: bool
    location: RiderLocation
    distance_meters: Optional[float] = None


def great_circle_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance between two WGS84 points on a spherical Earth."""
    return great_circle((lat1, lng1), (lat2, lng2)).meters


def validate_coordinates(lat, lng, lat_field="lat", lng_field="lng"):
    if lat is None or lng is None:
        raise BadRequestError(f"{lat_field}, {lng_field} are required")
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lng <= 180.0:
        raise BadRequestError(f"{lat_field}/{lng_field} out of range: ({lat}, {lng})")


def apply_location(db: Session, rider_id: int, lat: float, lng: float,
                   now: Optional[datetime] = None) -> RiderLocation:
    """Upsert inside the caller's transaction. Unconditional, no dedup."""
    now = now or datetime.utcnow()
    location = db.get(RiderLocation, rider_id)
    if location is None:
        location = RiderLocation(rider_id=rider_id, lat=lat, lng=lng, created_at=now, updated_at=now)
        db.add(location)
    else:
        location.lat = lat
        location.lng = lng
        location.updated_at = now
    return location


def upsert_rider_location(db: Session, rider_id: int, lat: float, lng: float,
                          dedup: Optional[bool] = None,
                          threshold_meters: Optional[float] = None) -> LocationUpdateResult:
    if rider_id is None:
        raise BadRequestError("rider_id, lat, lng are required")
    validate_coordinates(lat, lng)

    dedup = settings.LOCATION_DEDUP_ENABLED if dedup is None else dedup
    threshold = settings.LOCATION_DEDUP_METERS if threshold_meters is None else threshold_meters

    def _work(s: Session) -> LocationUpdateResult:
        current = s.get(RiderLocation, rider_id)
        distance = None
        if current is not None:
            distance = great_circle_meters(current.lat, current.lng, lat, lng)
            if dedup and distance <= threshold:
                return LocationUpdateResult(rider_id, updated=False, skipped=True,
                                            location=current, distance_meters=distance)
        elif s.get(User, rider_id) is None:
            raise NotFoundError(f"rider {rider_id} not found")

        location = apply_location(s, rider_id, lat, lng)
        return LocationUpdateResult(rider_id, updated=True, skipped=False,
                                    location=location, distance_meters=distance)

    result = run_transaction(db, _work)
    if result.skipped:
        logger.debug(f"[LOC] rider={rider_id} moved {result.distance_meters:.2f}m, skipped")
    else:
        logger.info(f"[LOC] rider={rider_id} at ({lat}, {lng})")
    return result


def get_rider_location(db: Session, rider_id: int) -> Optional[RiderLocation]:
    return db.get(RiderLocation, rider_id)
