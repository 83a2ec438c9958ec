# app/services/sequence_service.py
"""
Sequence allocation for human-readable entity ids.

Every entity kind draws from one named counter row. The read-modify-write
is protected by the row's version column: two transactions that read the
same value cannot both commit, the loser is rolled back and retried by
run_transaction(). This serialises all id issuance for a given name.
Callers go through the `allocator` object so the scheme can be replaced
(e.g. snowflake-style ids) without touching them.
"""

from abc import ABC, abstractmethod

from sqlalchemy.orm import Session

from app.database import SessionLocal, run_transaction
from app.models.sequence_counter import SequenceCounter
from app.utils.logger import get_logger

logger = get_logger(__name__)

USER_SEQ = "user_seq"
ADDRESS_SEQ = "address_seq"
RIDER_SEQ = "rider_seq"
DELIVERY_SEQ = "delivery_seq"
ASSIGNMENT_SEQ = "assi_seq"


class Allocator(ABC):
    """Issues strictly increasing integers per sequence name."""

    @abstractmethod
    def next_id(self, db: Session, sequence_name: str) -> int:
        """Allocate inside the caller's open transaction. Committed or rolled back with it."""

    @abstractmethod
    def allocate(self, sequence_name: str) -> int:
        """Allocate in a transaction of its own."""


class CounterAllocator(Allocator):

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def next_id(self, db: Session, sequence_name: str) -> int:
        counter = db.get(SequenceCounter, sequence_name)
        if counter is None:
            counter = SequenceCounter(name=sequence_name, value=1)
            db.add(counter)
        else:
            counter.value = counter.value + 1
        # Flush now so a second allocation in the same transaction sees this one
        db.flush()
        return counter.value

    def allocate(self, sequence_name: str) -> int:
        db = self.session_factory()
        try:
            value = run_transaction(db, lambda s: self.next_id(s, sequence_name))
        finally:
            db.close()
        logger.debug(f"[SEQ] {sequence_name} -> {value}")
        return value

    def current(self, db: Session, sequence_name: str) -> int:
        """High-water mark without allocating. 0 if the sequence was never used."""
        counter = db.get(SequenceCounter, sequence_name)
        return counter.value if counter else 0


allocator = CounterAllocator()
