# app/models/rider_car.py
"""Rider vehicle records. At most one per rider, keyed for lookup by the rider's user_id."""

from sqlalchemy import Column, Integer, String, ForeignKey
from app.database import Base


class RiderCar(Base):
    __tablename__ = "rider_cars"

    car_id = Column(Integer, primary_key=True, autoincrement=False)   # from rider_seq
    user_id = Column(Integer, ForeignKey("users.user_id"), unique=True, nullable=False, index=True)
    plate_number = Column(String(50), nullable=False)
    car_type = Column(String(50), nullable=False)
    image_car = Column(String)

    def __repr__(self):
        return f"<RiderCar {self.car_id} rider={self.user_id} plate={self.plate_number}>"
