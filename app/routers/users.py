# app/routers/users.py
"""Registration, login and user/rider-car lookups."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import ROLE_CUSTOMER
from app.schemas.user import (
    UserRegister, RiderRegister, LoginRequest, PhoneLookup, UserUpdate, UserOut, RiderCarOut,
)
from app.services import user_service

router = APIRouter()


@router.post("/register/user", status_code=status.HTTP_201_CREATED, summary="Register a customer")
def register_user(body: UserRegister, db: Session = Depends(get_db)):
    user = user_service.register_user(db, body, role=ROLE_CUSTOMER)
    return {"user": UserOut.model_validate(user)}


@router.post("/register/rider", status_code=status.HTTP_201_CREATED, summary="Register a rider with their car")
def register_rider(body: RiderRegister, db: Session = Depends(get_db)):
    user, car = user_service.register_rider(db, body)
    return {"user": UserOut.model_validate(user), "rider_car": RiderCarOut.model_validate(car)}


@router.post("/login", summary="Phone + password login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Plaintext comparison. Placeholder until real authentication exists."""
    user = user_service.login(db, body.phone, body.password)
    return {"user_id": user.user_id, "name": user.name, "phone": user.phone, "role": user.role}


@router.get("/users", summary="List all users")
def list_users(db: Session = Depends(get_db)):
    users = [UserOut.model_validate(u) for u in user_service.list_users(db)]
    return {"count": len(users), "users": users}


@router.post("/users/by-phone", response_model=UserOut, summary="Find a user by phone number")
def get_user_by_phone(body: PhoneLookup, db: Session = Depends(get_db)):
    return user_service.get_user_by_phone(db, body.phone)


@router.get("/users/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return user_service.get_user(db, user_id)


@router.patch("/users/{user_id}", response_model=UserOut, summary="Patch profile fields")
def update_user(user_id: int, body: UserUpdate, db: Session = Depends(get_db)):
    return user_service.update_user(db, user_id, body)


@router.delete("/users/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db)):
    user_service.delete_user(db, user_id)
    return {"ok": True, "message": f"user_id {user_id} deleted successfully"}


@router.get("/users/{user_id}/rider-car", response_model=RiderCarOut, summary="Car registered by a rider")
def get_rider_car(user_id: int, db: Session = Depends(get_db)):
    return user_service.get_rider_car(db, user_id)
