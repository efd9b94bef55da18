import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.deps import get_storage
from app.services.dashboard import compute_dashboard_stats
from app.storage.service import Storage

logger = logging.getLogger("staydesk.dashboard")

router = APIRouter(tags=["Dashboard"])


@router.get("/dashboard/stats")
def dashboard_stats(storage: Storage = Depends(get_storage)):
    try:
        return compute_dashboard_stats(storage.list_bookings(), datetime.utcnow())
    except Exception:
        logger.exception("Erro ao calcular estatisticas do dashboard")
        return JSONResponse(status_code=500, content={"message": "Ocorreu um erro, tente novamente mais tarde"})
