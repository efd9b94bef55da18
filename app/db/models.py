import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Relations are resolved at read time by the store. No foreign keys so that
# deleting a property or guest never cascades and never fails on dependents.


class Property(Base):
    __tablename__ = "properties"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    address = Column(String, nullable=False)
    max_guests = Column(Integer, nullable=False, default=1)
    daily_rate = Column(String, nullable=False)
    amenities = Column(JSON, nullable=True)
    photos = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Guest(Base):
    __tablename__ = "guests"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    last_name = Column(String, nullable=True)
    email = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=False)
    document = Column(String, nullable=True)
    cpf = Column(String, nullable=True)
    street = Column(String, nullable=True)
    number = Column(String, nullable=True)
    complement = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    property_id = Column(String, nullable=False, index=True)
    guest_id = Column(String, nullable=False, index=True)
    check_in = Column(DateTime, nullable=False)
    check_out = Column(DateTime, nullable=False)
    number_of_guests = Column(Integer, nullable=False)
    total_amount = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class MaintenanceTask(Base):
    __tablename__ = "maintenance_tasks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    property_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")
    scheduled_date = Column(DateTime, nullable=True)
    completed_date = Column(DateTime, nullable=True)
    assigned_to = Column(String, nullable=True)
    cost = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    property_id = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False)
    description = Column(String, nullable=False)
    amount = Column(String, nullable=False)
    date = Column(DateTime, nullable=False)
    receipt = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Message(Base):
    __tablename__ = "messages"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    booking_id = Column(String, nullable=True, index=True)
    guest_id = Column(String, nullable=True, index=True)
    subject = Column(String, nullable=True)
    content = Column(Text, nullable=False)
    type = Column(String, nullable=False, default="general")
    channel = Column(String, nullable=False, default="internal")
    direction = Column(String, nullable=False, default="outgoing")
    whatsapp_message_id = Column(String, nullable=True, index=True)
    whatsapp_status = Column(String, nullable=True)
    from_number = Column(String, nullable=True)
    to_number = Column(String, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    sent_at = Column(DateTime, default=datetime.utcnow, nullable=False)
