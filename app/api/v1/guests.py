from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.deps import get_storage
from app.storage import schemas
from app.storage.service import Storage

router = APIRouter(tags=["Hospedes"])


@router.get("/guests", response_model=list[schemas.Guest])
def list_guests(email: Optional[str] = Query(None), storage: Storage = Depends(get_storage)):
    if email:
        guest = storage.get_guest_by_email(email)
        return [guest] if guest else []
    return storage.list_guests()


@router.get("/guests/{guest_id}", response_model=schemas.Guest)
def get_guest(guest_id: str, storage: Storage = Depends(get_storage)):
    guest = storage.get_guest(guest_id)
    if not guest:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hospede nao encontrado")
    return guest


@router.post("/guests", response_model=schemas.Guest, status_code=status.HTTP_201_CREATED)
def create_guest(payload: schemas.GuestCreate, storage: Storage = Depends(get_storage)):
    return storage.create_guest(payload)


@router.patch("/guests/{guest_id}", response_model=schemas.Guest)
def update_guest(guest_id: str, payload: schemas.GuestUpdate, storage: Storage = Depends(get_storage)):
    guest = storage.update_guest(guest_id, payload)
    if not guest:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hospede nao encontrado")
    return guest


@router.delete("/guests/{guest_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_guest(guest_id: str, storage: Storage = Depends(get_storage)):
    if not storage.delete_guest(guest_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hospede nao encontrado")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
