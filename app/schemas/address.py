# app/schemas/address.py
from pydantic import BaseModel, Field
from typing import Optional


class AddressCreate(BaseModel):
    user_id: int
    address: str
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)


class AddressListRequest(BaseModel):
    user_id: int


class AddressDelete(BaseModel):
    user_id: int
    address_id: int


class AddressOut(BaseModel):
    address_id: int
    user_id: int
    address: str
    lat: Optional[float]
    lng: Optional[float]

    class Config:
        from_attributes = True
