# app/models/address.py
"""Address book entries. Owned by exactly one user; lat/lng are optional."""

from sqlalchemy import Column, Integer, String, Float, ForeignKey
from app.database import Base


class Address(Base):
    __tablename__ = "addresses"

    address_id = Column(Integer, primary_key=True, autoincrement=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    address = Column(String, nullable=False)
    lat = Column(Float)
    lng = Column(Float)

    def __repr__(self):
        return f"<Address {self.address_id} user={self.user_id}>"
