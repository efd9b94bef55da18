import logging
import uuid
from datetime import datetime
from typing import Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.db import models
from app.storage import schemas

logger = logging.getLogger("staydesk.storage")

RecordT = TypeVar("RecordT", bound=BaseModel)

PROPERTY_FIELDS = ("name", "description", "address", "max_guests", "daily_rate", "amenities", "photos")
GUEST_FIELDS = (
    "name",
    "last_name",
    "email",
    "phone",
    "document",
    "cpf",
    "street",
    "number",
    "complement",
    "city",
    "state",
    "zip_code",
    "notes",
)
BOOKING_FIELDS = (
    "property_id",
    "guest_id",
    "check_in",
    "check_out",
    "number_of_guests",
    "total_amount",
    "status",
    "notes",
)
MAINTENANCE_FIELDS = (
    "property_id",
    "title",
    "description",
    "type",
    "status",
    "scheduled_date",
    "completed_date",
    "assigned_to",
    "cost",
    "notes",
)
EXPENSE_FIELDS = ("property_id", "category", "description", "amount", "date", "receipt")
MESSAGE_FIELDS = (
    "guest_id",
    "booking_id",
    "subject",
    "content",
    "type",
    "channel",
    "direction",
    "whatsapp_message_id",
    "whatsapp_status",
    "from_number",
    "to_number",
    "is_read",
)


def merge_fields(row, changes: dict, allowed: tuple[str, ...]) -> None:
    """Copy the explicitly supplied ``changes`` onto ``row``.

    Only names in ``allowed`` are considered, so identifiers and creation
    timestamps can never be overwritten. ``None`` is dropped for columns that
    are not nullable.
    """
    columns = row.__table__.columns
    for field in allowed:
        if field not in changes:
            continue
        value = changes[field]
        if value is None and not columns[field].nullable:
            continue
        setattr(row, field, value)


class Storage:
    """Keyed storage for every rental entity plus the joined read views.

    Each call runs in its own session and commits before returning. Records
    handed back are pydantic copies, never the ORM rows themselves.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)

    def create_schema(self) -> None:
        models.Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self._session_factory()

    # Generic helpers

    def _list(self, model, record_cls: Type[RecordT], *criteria) -> list[RecordT]:
        with self.session() as db:
            rows = db.query(model).filter(*criteria).order_by(model.created_at.asc()).all()
            return [record_cls.model_validate(row) for row in rows]

    def _get(self, model, record_cls: Type[RecordT], item_id: str) -> Optional[RecordT]:
        with self.session() as db:
            row = db.get(model, item_id)
            return record_cls.model_validate(row) if row else None

    def _create(self, model, record_cls: Type[RecordT], payload: BaseModel, stamp: str = "created_at") -> RecordT:
        values = payload.model_dump()
        values["id"] = str(uuid.uuid4())
        values[stamp] = datetime.utcnow()
        with self.session() as db:
            row = model(**values)
            db.add(row)
            db.commit()
            return record_cls.model_validate(row)

    def _update(
        self,
        model,
        record_cls: Type[RecordT],
        item_id: str,
        payload: BaseModel,
        allowed: tuple[str, ...],
    ) -> Optional[RecordT]:
        with self.session() as db:
            row = db.get(model, item_id)
            if not row:
                return None
            merge_fields(row, payload.model_dump(exclude_unset=True), allowed)
            db.commit()
            return record_cls.model_validate(row)

    def _delete(self, model, item_id: str) -> bool:
        with self.session() as db:
            row = db.get(model, item_id)
            if not row:
                return False
            db.delete(row)
            db.commit()
            return True

    # Properties

    def list_properties(self) -> list[schemas.Property]:
        return self._list(models.Property, schemas.Property)

    def get_property(self, property_id: str) -> Optional[schemas.Property]:
        return self._get(models.Property, schemas.Property, property_id)

    def create_property(self, payload: schemas.PropertyCreate) -> schemas.Property:
        return self._create(models.Property, schemas.Property, payload)

    def update_property(self, property_id: str, payload: schemas.PropertyUpdate) -> Optional[schemas.Property]:
        return self._update(models.Property, schemas.Property, property_id, payload, PROPERTY_FIELDS)

    def delete_property(self, property_id: str) -> bool:
        return self._delete(models.Property, property_id)

    # Guests

    def list_guests(self) -> list[schemas.Guest]:
        return self._list(models.Guest, schemas.Guest)

    def get_guest(self, guest_id: str) -> Optional[schemas.Guest]:
        return self._get(models.Guest, schemas.Guest, guest_id)

    def get_guest_by_email(self, email: str) -> Optional[schemas.Guest]:
        with self.session() as db:
            row = (
                db.query(models.Guest)
                .filter(models.Guest.email == email)
                .order_by(models.Guest.created_at.asc())
                .first()
            )
            return schemas.Guest.model_validate(row) if row else None

    def create_guest(self, payload: schemas.GuestCreate) -> schemas.Guest:
        return self._create(models.Guest, schemas.Guest, payload)

    def update_guest(self, guest_id: str, payload: schemas.GuestUpdate) -> Optional[schemas.Guest]:
        return self._update(models.Guest, schemas.Guest, guest_id, payload, GUEST_FIELDS)

    def delete_guest(self, guest_id: str) -> bool:
        return self._delete(models.Guest, guest_id)

    # Bookings

    def _join_bookings(self, db: Session, rows: list[models.Booking]) -> list[schemas.BookingWithGuest]:
        guest_ids = {row.guest_id for row in rows}
        property_ids = {row.property_id for row in rows}
        guests = {g.id: g for g in db.query(models.Guest).filter(models.Guest.id.in_(list(guest_ids))).all()}
        properties = {
            p.id: p for p in db.query(models.Property).filter(models.Property.id.in_(list(property_ids))).all()
        }
        joined = []
        for row in rows:
            guest = guests.get(row.guest_id)
            prop = properties.get(row.property_id)
            if guest is None or prop is None:
                logger.debug("booking_id=%s omitted from joined view: relation missing", row.id)
                continue
            booking = schemas.Booking.model_validate(row)
            joined.append(
                schemas.BookingWithGuest(
                    **booking.model_dump(),
                    guest=schemas.Guest.model_validate(guest),
                    property=schemas.Property.model_validate(prop),
                )
            )
        return joined

    def _list_bookings(self, *criteria) -> list[schemas.BookingWithGuest]:
        with self.session() as db:
            rows = db.query(models.Booking).filter(*criteria).order_by(models.Booking.created_at.asc()).all()
            return self._join_bookings(db, rows)

    def list_bookings(self) -> list[schemas.BookingWithGuest]:
        return self._list_bookings()

    def get_booking(self, booking_id: str) -> Optional[schemas.BookingWithGuest]:
        with self.session() as db:
            row = db.get(models.Booking, booking_id)
            if not row:
                return None
            joined = self._join_bookings(db, [row])
            return joined[0] if joined else None

    def get_booking_record(self, booking_id: str) -> Optional[schemas.Booking]:
        return self._get(models.Booking, schemas.Booking, booking_id)

    def list_bookings_by_property(self, property_id: str) -> list[schemas.BookingWithGuest]:
        return self._list_bookings(models.Booking.property_id == property_id)

    def list_bookings_by_guest(self, guest_id: str) -> list[schemas.BookingWithGuest]:
        return self._list_bookings(models.Booking.guest_id == guest_id)

    def list_bookings_by_date_range(self, start: datetime, end: datetime) -> list[schemas.BookingWithGuest]:
        return self._list_bookings(models.Booking.check_in <= end, models.Booking.check_out >= start)

    def create_booking(self, payload: schemas.BookingCreate) -> schemas.Booking:
        return self._create(models.Booking, schemas.Booking, payload)

    def update_booking(self, booking_id: str, payload: schemas.BookingUpdate) -> Optional[schemas.Booking]:
        return self._update(models.Booking, schemas.Booking, booking_id, payload, BOOKING_FIELDS)

    def delete_booking(self, booking_id: str) -> bool:
        return self._delete(models.Booking, booking_id)

    # Maintenance tasks

    def list_maintenance_tasks(self) -> list[schemas.MaintenanceTask]:
        return self._list(models.MaintenanceTask, schemas.MaintenanceTask)

    def get_maintenance_task(self, task_id: str) -> Optional[schemas.MaintenanceTask]:
        return self._get(models.MaintenanceTask, schemas.MaintenanceTask, task_id)

    def list_maintenance_tasks_by_property(self, property_id: str) -> list[schemas.MaintenanceTask]:
        return self._list(
            models.MaintenanceTask, schemas.MaintenanceTask, models.MaintenanceTask.property_id == property_id
        )

    def create_maintenance_task(self, payload: schemas.MaintenanceTaskCreate) -> schemas.MaintenanceTask:
        return self._create(models.MaintenanceTask, schemas.MaintenanceTask, payload)

    def update_maintenance_task(
        self, task_id: str, payload: schemas.MaintenanceTaskUpdate
    ) -> Optional[schemas.MaintenanceTask]:
        return self._update(models.MaintenanceTask, schemas.MaintenanceTask, task_id, payload, MAINTENANCE_FIELDS)

    def delete_maintenance_task(self, task_id: str) -> bool:
        return self._delete(models.MaintenanceTask, task_id)

    # Expenses

    def list_expenses(self) -> list[schemas.Expense]:
        return self._list(models.Expense, schemas.Expense)

    def get_expense(self, expense_id: str) -> Optional[schemas.Expense]:
        return self._get(models.Expense, schemas.Expense, expense_id)

    def list_expenses_by_property(self, property_id: str) -> list[schemas.Expense]:
        return self._list(models.Expense, schemas.Expense, models.Expense.property_id == property_id)

    def list_expenses_by_date_range(self, start: datetime, end: datetime) -> list[schemas.Expense]:
        return self._list(models.Expense, schemas.Expense, models.Expense.date >= start, models.Expense.date <= end)

    def create_expense(self, payload: schemas.ExpenseCreate) -> schemas.Expense:
        return self._create(models.Expense, schemas.Expense, payload)

    def update_expense(self, expense_id: str, payload: schemas.ExpenseUpdate) -> Optional[schemas.Expense]:
        return self._update(models.Expense, schemas.Expense, expense_id, payload, EXPENSE_FIELDS)

    def delete_expense(self, expense_id: str) -> bool:
        return self._delete(models.Expense, expense_id)

    # Messages

    def _join_messages(self, db: Session, rows: list[models.Message]) -> list[schemas.MessageWithRelations]:
        guest_ids = {row.guest_id for row in rows if row.guest_id}
        booking_ids = {row.booking_id for row in rows if row.booking_id}
        guests = {}
        if guest_ids:
            guests = {g.id: g for g in db.query(models.Guest).filter(models.Guest.id.in_(list(guest_ids))).all()}
        bookings = {}
        if booking_ids:
            booking_rows = db.query(models.Booking).filter(models.Booking.id.in_(list(booking_ids))).all()
            bookings = {b.id: b for b in self._join_bookings(db, booking_rows)}
        joined = []
        for row in rows:
            message = schemas.Message.model_validate(row)
            guest = guests.get(row.guest_id) if row.guest_id else None
            joined.append(
                schemas.MessageWithRelations(
                    **message.model_dump(),
                    guest=schemas.Guest.model_validate(guest) if guest else None,
                    booking=bookings.get(row.booking_id) if row.booking_id else None,
                )
            )
        return joined

    def _list_messages(self, *criteria) -> list[schemas.MessageWithRelations]:
        with self.session() as db:
            rows = db.query(models.Message).filter(*criteria).order_by(models.Message.sent_at.asc()).all()
            return self._join_messages(db, rows)

    def list_messages(self) -> list[schemas.MessageWithRelations]:
        return self._list_messages()

    def get_message(self, message_id: str) -> Optional[schemas.MessageWithRelations]:
        with self.session() as db:
            row = db.get(models.Message, message_id)
            if not row:
                return None
            return self._join_messages(db, [row])[0]

    def list_messages_by_booking(self, booking_id: str) -> list[schemas.MessageWithRelations]:
        return self._list_messages(models.Message.booking_id == booking_id)

    def list_messages_by_guest(self, guest_id: str) -> list[schemas.MessageWithRelations]:
        return self._list_messages(models.Message.guest_id == guest_id)

    def list_messages_by_channel(self, channel: str) -> list[schemas.MessageWithRelations]:
        return self._list_messages(models.Message.channel == channel)

    def get_whatsapp_messages(self, phone_number: Optional[str] = None) -> list[schemas.MessageWithRelations]:
        if not phone_number:
            return self.list_messages_by_channel("whatsapp")
        return self._list_messages(
            models.Message.channel == "whatsapp",
            or_(models.Message.from_number == phone_number, models.Message.to_number == phone_number),
        )

    def create_message(self, payload: schemas.MessageCreate) -> schemas.Message:
        return self._create(models.Message, schemas.Message, payload, stamp="sent_at")

    def update_message(self, message_id: str, payload: schemas.MessageUpdate) -> Optional[schemas.Message]:
        return self._update(models.Message, schemas.Message, message_id, payload, MESSAGE_FIELDS)

    def update_whatsapp_status(self, whatsapp_message_id: str, status: str) -> Optional[schemas.Message]:
        with self.session() as db:
            row = (
                db.query(models.Message)
                .filter(models.Message.whatsapp_message_id == whatsapp_message_id)
                .order_by(models.Message.sent_at.asc())
                .first()
            )
            if not row:
                return None
            row.whatsapp_status = status
            db.commit()
            return schemas.Message.model_validate(row)

    def delete_message(self, message_id: str) -> bool:
        return self._delete(models.Message, message_id)
