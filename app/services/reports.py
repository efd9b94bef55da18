from collections import defaultdict
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterable

from app.services.bookings import nights_between
from app.services.dashboard import money
from app.storage.schemas import Booking, Expense

PERIODS = ("this_month", "last_month", "this_year", "last_year")

PERIOD_LABELS = {
    "this_month": "Este Mês",
    "last_month": "Mês Passado",
    "this_year": "Este Ano",
    "last_year": "Ano Passado",
}

CATEGORY_LABELS = {
    "maintenance": "Manutenção",
    "utilities": "Utilidades",
    "supplies": "Suprimentos",
    "insurance": "Seguro",
    "taxes": "Impostos",
    "other": "Outros",
}


def _last_day_of_month(year: int, month: int) -> date:
    if month == 12:
        return date(year, 12, 31)
    return date(year, month + 1, 1) - timedelta(days=1)


def period_range(period: str, today: date) -> tuple[datetime, datetime]:
    if period not in PERIODS:
        raise ValueError(f"Periodo invalido: {period}")
    if period == "this_month":
        first = date(today.year, today.month, 1)
        last = _last_day_of_month(today.year, today.month)
    elif period == "last_month":
        year, month = (today.year - 1, 12) if today.month == 1 else (today.year, today.month - 1)
        first = date(year, month, 1)
        last = _last_day_of_month(year, month)
    elif period == "this_year":
        first = date(today.year, 1, 1)
        last = date(today.year, 12, 31)
    else:
        first = date(today.year - 1, 1, 1)
        last = date(today.year - 1, 12, 31)
    return datetime.combine(first, time.min), datetime.combine(last, time.max)


def build_report(
    bookings: Iterable[Booking],
    expenses: Iterable[Expense],
    period: str,
    today: date,
) -> dict:
    start, end = period_range(period, today)
    period_bookings = [b for b in bookings if start <= b.check_in <= end]
    period_expenses = [e for e in expenses if start <= e.date <= end]
    confirmed = [b for b in period_bookings if b.status == "confirmed"]

    total_revenue = sum((Decimal(b.total_amount) for b in confirmed), Decimal("0"))
    total_expenses = sum((Decimal(e.amount) for e in period_expenses), Decimal("0"))
    by_category: dict[str, Decimal] = defaultdict(Decimal)
    for expense in period_expenses:
        by_category[expense.category] += Decimal(expense.amount)

    average_booking = total_revenue / len(confirmed) if confirmed else Decimal("0")
    average_stay = (
        sum(nights_between(b.check_in, b.check_out) for b in confirmed) / len(confirmed) if confirmed else 0
    )

    return {
        "period": period,
        "periodLabel": PERIOD_LABELS[period],
        "startDate": start,
        "endDate": end,
        "metrics": {
            "totalBookings": len(period_bookings),
            "confirmedBookings": len(confirmed),
            "totalRevenue": money(total_revenue),
            "totalExpenses": money(total_expenses),
            "netIncome": money(total_revenue - total_expenses),
            "averageBookingValue": money(average_booking),
            "totalGuests": sum(b.number_of_guests for b in confirmed),
            "averageStayLength": round(average_stay, 2),
        },
        "expensesByCategory": {category: money(amount) for category, amount in by_category.items()},
        "bookings": period_bookings,
        "expenses": period_expenses,
    }
