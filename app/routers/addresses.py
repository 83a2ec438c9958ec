# app/routers/addresses.py
"""Address book endpoints. Identifiers travel in the request body."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.address import AddressCreate, AddressListRequest, AddressDelete, AddressOut
from app.services import address_service

router = APIRouter()


@router.post("/users/addresses", response_model=AddressOut, status_code=status.HTTP_201_CREATED)
def create_address(body: AddressCreate, db: Session = Depends(get_db)):
    return address_service.create_address(db, body)


@router.get("/users/address/{address_id}", response_model=AddressOut)
def get_address(address_id: int, db: Session = Depends(get_db)):
    return address_service.get_address(db, address_id)


@router.post("/users/addresses/list", summary="Addresses of a user, oldest first")
def list_addresses(body: AddressListRequest, db: Session = Depends(get_db)):
    items = [AddressOut.model_validate(a) for a in address_service.list_addresses(db, body.user_id)]
    return {"count": len(items), "items": items}


@router.post("/users/addresses/delete", summary="Delete an address (owner only)")
def delete_address(body: AddressDelete, db: Session = Depends(get_db)):
    address_service.delete_address(db, body.user_id, body.address_id)
    return {"ok": True, "message": f"address_id {body.address_id} deleted successfully"}
