# app/models/delivery.py
"""
Delivery orders. `status` moves waiting → accept → transporting → finish,
or to cancel from any non-terminal state. Versioned so that two riders
racing to accept the same job cannot both commit.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from app.database import Base

STATUS_WAITING = "waiting"
STATUS_ACCEPT = "accept"
STATUS_TRANSPORTING = "transporting"
STATUS_FINISH = "finish"
STATUS_CANCEL = "cancel"

TERMINAL_STATUSES = {STATUS_FINISH, STATUS_CANCEL}
ACTIVE_STATUSES = {STATUS_ACCEPT, STATUS_TRANSPORTING}


class Delivery(Base):
    __tablename__ = "deliveries"

    delivery_id = Column(Integer, primary_key=True, autoincrement=False)
    user_id_sender = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    user_id_receiver = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    phone_receiver = Column(String(30))
    address_id_sender = Column(Integer, ForeignKey("addresses.address_id"), nullable=False)
    address_id_receiver = Column(Integer, ForeignKey("addresses.address_id"), nullable=False)
    name_product = Column(String, default="", nullable=False)
    detail_product = Column(String, default="", nullable=False)
    picture_product = Column(String)
    amount = Column(Integer, default=1, nullable=False)
    picture_status1 = Column(String)      # proof of pickup taken by the sender
    status = Column(String(20), default=STATUS_WAITING, nullable=False, index=True)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Delivery {self.delivery_id} status={self.status}>"
