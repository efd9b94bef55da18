from datetime import date, datetime
from io import BytesIO
from typing import Tuple

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from app.services.reports import CATEGORY_LABELS

BOOKING_HEADERS = [
    "Reserva",
    "Imovel",
    "Hospede",
    "Email",
    "Check-in",
    "Check-out",
    "Hospedes",
    "Valor total",
    "Status",
]
EXPENSE_HEADERS = ["Despesa", "Imovel", "Categoria", "Descricao", "Valor", "Data", "Comprovante"]

METRIC_LABELS = [
    ("totalBookings", "Reservas"),
    ("confirmedBookings", "Reservas confirmadas"),
    ("totalRevenue", "Receita total"),
    ("totalExpenses", "Despesas totais"),
    ("netIncome", "Resultado liquido"),
    ("averageBookingValue", "Valor medio por reserva"),
    ("totalGuests", "Total de hospedes"),
    ("averageStayLength", "Estadia media (noites)"),
]


def _size_columns(ws, count: int, width: int = 22) -> None:
    for idx in range(1, count + 1):
        ws.column_dimensions[get_column_letter(idx)].width = width


def build_report_workbook(report: dict, today: date) -> Tuple[bytes, str]:
    wb = Workbook()
    ws = wb.active
    ws.title = "RESUMO"
    ws["A1"] = "Periodo"
    ws["B1"] = report["periodLabel"]
    ws["A2"] = "Inicio"
    ws["B2"] = report["startDate"].date().isoformat()
    ws["A3"] = "Fim"
    ws["B3"] = report["endDate"].date().isoformat()
    row = 5
    for key, label in METRIC_LABELS:
        ws.cell(row=row, column=1, value=label)
        ws.cell(row=row, column=2, value=report["metrics"][key])
        row += 1
    row += 1
    ws.cell(row=row, column=1, value="Despesas por categoria")
    for category, amount in report["expensesByCategory"].items():
        row += 1
        ws.cell(row=row, column=1, value=CATEGORY_LABELS.get(category, category))
        ws.cell(row=row, column=2, value=amount)
    ws["D1"] = "Gerado em"
    ws["E1"] = datetime.utcnow().isoformat()
    _size_columns(ws, 5, width=26)

    bookings_ws = wb.create_sheet("RESERVAS")
    bookings_ws.append(BOOKING_HEADERS)
    for booking in report["bookings"]:
        guest = getattr(booking, "guest", None)
        prop = getattr(booking, "property", None)
        bookings_ws.append(
            [
                booking.id,
                prop.name if prop else booking.property_id,
                " ".join(filter(None, [guest.name, guest.last_name])) if guest else booking.guest_id,
                guest.email if guest else None,
                booking.check_in,
                booking.check_out,
                booking.number_of_guests,
                float(booking.total_amount),
                booking.status,
            ]
        )
    bookings_ws.freeze_panes = "A2"
    _size_columns(bookings_ws, len(BOOKING_HEADERS))

    expenses_ws = wb.create_sheet("DESPESAS")
    expenses_ws.append(EXPENSE_HEADERS)
    for expense in report["expenses"]:
        expenses_ws.append(
            [
                expense.id,
                expense.property_id,
                CATEGORY_LABELS.get(expense.category, expense.category),
                expense.description,
                float(expense.amount),
                expense.date,
                expense.receipt,
            ]
        )
    expenses_ws.freeze_panes = "A2"
    _size_columns(expenses_ws, len(EXPENSE_HEADERS))

    out = BytesIO()
    wb.save(out)
    filename = f"relatorio-{report['period']}-{today.isoformat()}.xlsx"
    return out.getvalue(), filename
