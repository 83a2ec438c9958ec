# app/models/assignment.py
"""
Delivery assignments — which rider handled which delivery, and the proof
images captured along the way. Append-only: rows are never deleted.
The partial unique index allows a single active (accept/transporting)
assignment per delivery.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, text
from app.database import Base

_ACTIVE = text("status IN ('accept', 'transporting')")


class DeliveryAssignment(Base):
    __tablename__ = "assignments"

    assi_id = Column(Integer, primary_key=True, autoincrement=False)
    delivery_id = Column(Integer, ForeignKey("deliveries.delivery_id"), nullable=False, index=True)
    rider_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    picture_status2 = Column(String)      # pickup confirmation
    picture_status3 = Column(String)      # delivery confirmation
    created_at = Column(DateTime)
    updated_at = Column(DateTime)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (
        Index("ix_assignments_active_delivery", "delivery_id", unique=True,
              postgresql_where=_ACTIVE, sqlite_where=_ACTIVE),
    )

    def __repr__(self):
        return f"<DeliveryAssignment {self.assi_id} delivery={self.delivery_id} rider={self.rider_id} status={self.status}>"
