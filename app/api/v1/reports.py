import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from app.api.deps import get_storage
from app.services.report_export import build_report_workbook
from app.services.reports import PERIODS, build_report
from app.storage.service import Storage

logger = logging.getLogger("staydesk.reports")

router = APIRouter(tags=["Relatorios"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _report(storage: Storage, period: str) -> dict:
    if period not in PERIODS:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Periodo invalido")
    return build_report(storage.list_bookings(), storage.list_expenses(), period, datetime.utcnow().date())


@router.get("/reports/summary")
def report_summary(period: str = Query("this_month"), storage: Storage = Depends(get_storage)):
    report = _report(storage, period)
    report["bookings"] = [b.model_dump(mode="json", by_alias=True) for b in report["bookings"]]
    report["expenses"] = [e.model_dump(mode="json", by_alias=True) for e in report["expenses"]]
    return report


@router.get("/reports/export")
def report_export(period: str = Query("this_month"), storage: Storage = Depends(get_storage)):
    report = _report(storage, period)
    content, filename = build_report_workbook(report, datetime.utcnow().date())
    logger.info("report exported period=%s bookings=%s", period, len(report["bookings"]))
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
