import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.deps import get_storage
from app.services.bookings import BookingRequest, GuestRequiredError, create_booking_for_guest
from app.storage import schemas
from app.storage.schemas import to_naive_utc
from app.storage.service import Storage

logger = logging.getLogger("staydesk.bookings")

router = APIRouter(tags=["Reservas"])


@router.get("/bookings", response_model=list[schemas.BookingWithGuest])
def list_bookings(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    property_id: Optional[str] = Query(None, alias="propertyId"),
    guest_id: Optional[str] = Query(None, alias="guestId"),
    storage: Storage = Depends(get_storage),
):
    if start_date and end_date:
        return storage.list_bookings_by_date_range(to_naive_utc(start_date), to_naive_utc(end_date))
    if property_id:
        return storage.list_bookings_by_property(property_id)
    if guest_id:
        return storage.list_bookings_by_guest(guest_id)
    return storage.list_bookings()


@router.get("/bookings/{booking_id}", response_model=schemas.BookingWithGuest)
def get_booking(booking_id: str, storage: Storage = Depends(get_storage)):
    booking = storage.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reserva nao encontrada")
    return booking


@router.post("/bookings", response_model=schemas.Booking, status_code=status.HTTP_201_CREATED)
def create_booking(payload: BookingRequest, storage: Storage = Depends(get_storage)):
    try:
        booking = create_booking_for_guest(storage, payload)
    except GuestRequiredError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    logger.info("booking created booking_id=%s guest_id=%s", booking.id, booking.guest_id)
    return booking


@router.patch("/bookings/{booking_id}", response_model=schemas.Booking)
def update_booking(booking_id: str, payload: schemas.BookingUpdate, storage: Storage = Depends(get_storage)):
    booking = storage.update_booking(booking_id, payload)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reserva nao encontrada")
    return booking


@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(booking_id: str, storage: Storage = Depends(get_storage)):
    if not storage.delete_booking(booking_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reserva nao encontrada")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
