from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Literal, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, Field
from pydantic.alias_generators import to_camel

BookingStatus = Literal["pending", "confirmed", "cancelled", "completed"]
TaskType = Literal["cleaning", "repair", "maintenance", "inspection"]
TaskStatus = Literal["pending", "in_progress", "completed", "cancelled"]
ExpenseCategory = Literal["maintenance", "utilities", "supplies", "insurance", "taxes", "other"]
MessageType = Literal["general", "check_in_instructions", "reminder", "complaint"]
MessageChannel = Literal["internal", "whatsapp", "email", "sms"]
MessageDirection = Literal["incoming", "outgoing"]


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _decimal_string(value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return value
    text = str(value).strip()
    try:
        parsed = Decimal(text)
    except InvalidOperation:
        raise ValueError("Valor decimal invalido")
    if not parsed.is_finite():
        raise ValueError("Valor decimal invalido")
    return text


DecimalStr = Annotated[str, BeforeValidator(_decimal_string)]
UtcDatetime = Annotated[datetime, AfterValidator(to_naive_utc)]


class ApiModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True, "from_attributes": True}


# Stored records


class Property(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    address: str
    max_guests: int
    daily_rate: str
    amenities: Optional[list[str]] = None
    photos: Optional[list[str]] = None
    created_at: datetime


class Guest(ApiModel):
    id: str
    name: str
    last_name: Optional[str] = None
    email: str
    phone: str
    document: Optional[str] = None
    cpf: Optional[str] = None
    street: Optional[str] = None
    number: Optional[str] = None
    complement: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime


class Booking(ApiModel):
    id: str
    property_id: str
    guest_id: str
    check_in: datetime
    check_out: datetime
    number_of_guests: int
    total_amount: str
    status: str
    notes: Optional[str] = None
    created_at: datetime


class BookingWithGuest(Booking):
    guest: Guest
    property: Property


class MaintenanceTask(ApiModel):
    id: str
    property_id: str
    title: str
    description: Optional[str] = None
    type: str
    status: str
    scheduled_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    assigned_to: Optional[str] = None
    cost: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime


class Expense(ApiModel):
    id: str
    property_id: str
    category: str
    description: str
    amount: str
    date: datetime
    receipt: Optional[str] = None
    created_at: datetime


class Message(ApiModel):
    id: str
    guest_id: Optional[str] = None
    booking_id: Optional[str] = None
    subject: Optional[str] = None
    content: str
    type: str
    channel: str
    direction: str
    whatsapp_message_id: Optional[str] = None
    whatsapp_status: Optional[str] = None
    from_number: Optional[str] = None
    to_number: Optional[str] = None
    is_read: bool
    sent_at: datetime


class MessageWithRelations(Message):
    guest: Optional[Guest] = None
    booking: Optional[BookingWithGuest] = None


# Inputs


class PropertyCreate(ApiModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    address: str = Field(..., min_length=1)
    max_guests: int = Field(1, ge=1)
    daily_rate: DecimalStr
    amenities: Optional[list[str]] = None
    photos: Optional[list[str]] = None


class PropertyUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    address: Optional[str] = Field(None, min_length=1)
    max_guests: Optional[int] = Field(None, ge=1)
    daily_rate: Optional[DecimalStr] = None
    amenities: Optional[list[str]] = None
    photos: Optional[list[str]] = None


class GuestCreate(ApiModel):
    name: str = Field(..., min_length=1)
    last_name: Optional[str] = None
    email: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    document: Optional[str] = None
    cpf: Optional[str] = None
    street: Optional[str] = None
    number: Optional[str] = None
    complement: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    notes: Optional[str] = None


class GuestUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = None
    email: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, min_length=1)
    document: Optional[str] = None
    cpf: Optional[str] = None
    street: Optional[str] = None
    number: Optional[str] = None
    complement: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    notes: Optional[str] = None


class BookingCreate(ApiModel):
    property_id: str
    guest_id: str
    check_in: UtcDatetime
    check_out: UtcDatetime
    number_of_guests: int = Field(..., ge=1)
    total_amount: DecimalStr
    status: BookingStatus = "confirmed"
    notes: Optional[str] = None


class BookingUpdate(ApiModel):
    property_id: Optional[str] = None
    guest_id: Optional[str] = None
    check_in: Optional[UtcDatetime] = None
    check_out: Optional[UtcDatetime] = None
    number_of_guests: Optional[int] = Field(None, ge=1)
    total_amount: Optional[DecimalStr] = None
    status: Optional[BookingStatus] = None
    notes: Optional[str] = None


class MaintenanceTaskCreate(ApiModel):
    property_id: str
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: TaskType
    status: TaskStatus = "pending"
    scheduled_date: Optional[UtcDatetime] = None
    completed_date: Optional[UtcDatetime] = None
    assigned_to: Optional[str] = None
    cost: Optional[DecimalStr] = None
    notes: Optional[str] = None


class MaintenanceTaskUpdate(ApiModel):
    property_id: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    type: Optional[TaskType] = None
    status: Optional[TaskStatus] = None
    scheduled_date: Optional[UtcDatetime] = None
    completed_date: Optional[UtcDatetime] = None
    assigned_to: Optional[str] = None
    cost: Optional[DecimalStr] = None
    notes: Optional[str] = None


class ExpenseCreate(ApiModel):
    property_id: str
    category: ExpenseCategory
    description: str = Field(..., min_length=1)
    amount: DecimalStr
    date: UtcDatetime
    receipt: Optional[str] = None


class ExpenseUpdate(ApiModel):
    property_id: Optional[str] = None
    category: Optional[ExpenseCategory] = None
    description: Optional[str] = Field(None, min_length=1)
    amount: Optional[DecimalStr] = None
    date: Optional[UtcDatetime] = None
    receipt: Optional[str] = None


class MessageCreate(ApiModel):
    guest_id: Optional[str] = None
    booking_id: Optional[str] = None
    subject: Optional[str] = None
    content: str = Field(..., min_length=1)
    type: MessageType = "general"
    channel: MessageChannel = "internal"
    direction: MessageDirection = "outgoing"
    whatsapp_message_id: Optional[str] = None
    whatsapp_status: Optional[str] = None
    from_number: Optional[str] = None
    to_number: Optional[str] = None
    is_read: bool = False


class MessageUpdate(ApiModel):
    guest_id: Optional[str] = None
    booking_id: Optional[str] = None
    subject: Optional[str] = None
    content: Optional[str] = Field(None, min_length=1)
    type: Optional[MessageType] = None
    channel: Optional[MessageChannel] = None
    direction: Optional[MessageDirection] = None
    whatsapp_message_id: Optional[str] = None
    whatsapp_status: Optional[str] = None
    from_number: Optional[str] = None
    to_number: Optional[str] = None
    is_read: Optional[bool] = None
