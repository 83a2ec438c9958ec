# app/models/user.py
"""
Users table — customers (role 0) and riders (role 1).
A rider's user_id is also their rider identity everywhere else in the system.
"""

from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base

ROLE_CUSTOMER = 0
ROLE_RIDER = 1


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(200), nullable=False)
    password = Column(String(200), nullable=False)   # Plaintext placeholder, not a credential store
    phone = Column(String(30), unique=True, nullable=False, index=True)
    picture = Column(String)
    role = Column(Integer, default=ROLE_CUSTOMER, nullable=False)
    created_at = Column(DateTime)

    @property
    def is_rider(self) -> bool:
        return self.role == ROLE_RIDER

    def __repr__(self):
        return f"<User {self.user_id} phone={self.phone} role={self.role}>"
