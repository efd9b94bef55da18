import logging
from datetime import datetime
from typing import Optional

from pydantic import Field

from app.storage import schemas
from app.storage.schemas import ApiModel, BookingStatus, DecimalStr, UtcDatetime
from app.storage.service import Storage

logger = logging.getLogger("staydesk.bookings")


class GuestRequiredError(ValueError):
    pass


class BookingRequest(ApiModel):
    """Booking body as sent by the dashboard: the guest comes by id or by email + data."""

    property_id: str
    guest_id: Optional[str] = None
    guest_email: Optional[str] = None
    guest_data: Optional[schemas.GuestCreate] = None
    check_in: UtcDatetime
    check_out: UtcDatetime
    number_of_guests: int = Field(..., ge=1)
    total_amount: DecimalStr
    status: BookingStatus = "confirmed"
    notes: Optional[str] = None


def resolve_guest(
    storage: Storage,
    guest_id: Optional[str] = None,
    guest_email: Optional[str] = None,
    guest_data: Optional[schemas.GuestCreate] = None,
) -> Optional[schemas.Guest]:
    if guest_email:
        guest = storage.get_guest_by_email(guest_email)
        if guest:
            return guest
    elif guest_id:
        guest = storage.get_guest(guest_id)
        if guest:
            return guest
    if guest_data is None:
        return None
    guest = storage.create_guest(guest_data)
    logger.info("guest created during booking intake guest_id=%s", guest.id)
    return guest


def create_booking_for_guest(storage: Storage, payload: BookingRequest) -> schemas.Booking:
    guest = resolve_guest(storage, payload.guest_id, payload.guest_email, payload.guest_data)
    if guest is None:
        raise GuestRequiredError("Informacoes do hospede sao obrigatorias")
    booking = storage.create_booking(
        schemas.BookingCreate(
            property_id=payload.property_id,
            guest_id=guest.id,
            check_in=payload.check_in,
            check_out=payload.check_out,
            number_of_guests=payload.number_of_guests,
            total_amount=payload.total_amount,
            status=payload.status,
            notes=payload.notes,
        )
    )
    return booking


def nights_between(check_in: datetime, check_out: datetime) -> int:
    seconds = (check_out - check_in).total_seconds()
    whole, rest = divmod(seconds, 86400)
    return int(whole) + (1 if rest > 0 else 0)
