import logging

from app.core.config import settings
from app.storage import schemas
from app.storage.service import Storage

logger = logging.getLogger("staydesk.init_db")

DEFAULT_PROPERTY = schemas.PropertyCreate(
    name="Casa da Praia",
    description="Beautiful beachfront vacation rental with stunning ocean views",
    address="123 Ocean Drive, Coastal City",
    max_guests=6,
    daily_rate="400.00",
    amenities=["Wi-Fi", "Air Conditioning", "Kitchen", "Beach Access", "Parking"],
    photos=[],
)


def seed_initial_data(storage: Storage) -> None:
    if not settings.SEED_DEFAULT_PROPERTY:
        return
    if storage.list_properties():
        return
    prop = storage.create_property(DEFAULT_PROPERTY)
    logger.info("default property seeded property_id=%s", prop.id)


def init_storage(storage: Storage) -> None:
    storage.create_schema()
    seed_initial_data(storage)
