# app/models/rider_location.py
"""Last known position per rider. Overwritten in place, no history kept."""

from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey
from app.database import Base


class RiderLocation(Base):
    __tablename__ = "rider_locations"

    rider_id = Column(Integer, ForeignKey("users.user_id"), primary_key=True, autoincrement=False)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<RiderLocation rider={self.rider_id} ({self.lat}, {self.lng})>"
