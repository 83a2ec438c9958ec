# app/models/sequence_counter.py
"""
Named sequence counters (user_seq, address_seq, rider_seq, delivery_seq, assi_seq).
One row per sequence. `value` is the last id handed out; a missing row means 0.
Only ever mutated by app.services.sequence_service inside a transaction.
"""

from sqlalchemy import Column, Integer, String
from app.database import Base


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, default=0, nullable=False)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<SequenceCounter {self.name}={self.value}>"
