from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from app.services.bookings import nights_between
from app.storage.schemas import Booking

OCCUPANCY_WINDOW_DAYS = 30


def month_window(now: datetime) -> tuple[datetime, datetime]:
    start = datetime(now.year, now.month, 1)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1)
    else:
        end = datetime(now.year, now.month + 1, 1)
    return start, end


def money(value: Decimal) -> float:
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_dashboard_stats(bookings: Iterable[Booking], now: datetime) -> dict:
    bookings = list(bookings)
    start, end = month_window(now)
    confirmed_this_month = [
        b for b in bookings if b.status == "confirmed" and start <= b.check_in < end
    ]
    occupied_days = sum(nights_between(b.check_in, b.check_out) for b in confirmed_this_month)
    occupancy_rate = (Decimal(occupied_days) / OCCUPANCY_WINDOW_DAYS * 100).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    monthly_revenue = sum((Decimal(b.total_amount) for b in confirmed_this_month), Decimal("0"))
    active_reservations = sum(1 for b in bookings if b.status == "confirmed" and b.check_out >= now)
    return {
        "occupancyRate": int(occupancy_rate),
        "monthlyRevenue": money(monthly_revenue),
        "activeReservations": active_reservations,
    }
