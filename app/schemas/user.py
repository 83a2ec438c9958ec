# app/schemas/user.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class UserRegister(BaseModel):
    name: str
    phone: str
    password: str
    picture: Optional[str] = None


class RiderRegister(UserRegister):
    plate_number: str
    car_type: str
    image_car: Optional[str] = None


class LoginRequest(BaseModel):
    phone: str
    password: str


class PhoneLookup(BaseModel):
    phone: str


class UserUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None
    picture: Optional[str] = None


class UserOut(BaseModel):
    user_id: int
    name: str
    phone: str
    picture: Optional[str]
    role: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RiderCarOut(BaseModel):
    car_id: int
    user_id: int
    plate_number: str
    car_type: str
    image_car: Optional[str]

    class Config:
        from_attributes = True
