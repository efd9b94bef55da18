from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.deps import get_storage
from app.storage import schemas
from app.storage.service import Storage

router = APIRouter(tags=["Mensagens"])


@router.get("/messages", response_model=list[schemas.MessageWithRelations])
def list_messages(
    booking_id: Optional[str] = Query(None, alias="bookingId"),
    guest_id: Optional[str] = Query(None, alias="guestId"),
    channel: Optional[str] = Query(None),
    storage: Storage = Depends(get_storage),
):
    if booking_id:
        return storage.list_messages_by_booking(booking_id)
    if guest_id:
        return storage.list_messages_by_guest(guest_id)
    if channel:
        return storage.list_messages_by_channel(channel)
    return storage.list_messages()


@router.get("/messages/whatsapp", response_model=list[schemas.MessageWithRelations])
def list_whatsapp_messages(
    phone_number: Optional[str] = Query(None, alias="phoneNumber"),
    storage: Storage = Depends(get_storage),
):
    return storage.get_whatsapp_messages(phone_number)


@router.get("/messages/{message_id}", response_model=schemas.MessageWithRelations)
def get_message(message_id: str, storage: Storage = Depends(get_storage)):
    message = storage.get_message(message_id)
    if not message:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mensagem nao encontrada")
    return message


@router.post("/messages", response_model=schemas.Message, status_code=status.HTTP_201_CREATED)
def create_message(payload: schemas.MessageCreate, storage: Storage = Depends(get_storage)):
    return storage.create_message(payload)


@router.patch("/messages/{message_id}", response_model=schemas.Message)
def update_message(message_id: str, payload: schemas.MessageUpdate, storage: Storage = Depends(get_storage)):
    message = storage.update_message(message_id, payload)
    if not message:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mensagem nao encontrada")
    return message


@router.delete("/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_message(message_id: str, storage: Storage = Depends(get_storage)):
    if not storage.delete_message(message_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mensagem nao encontrada")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
