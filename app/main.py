import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.bookings import router as bookings_router
from app.api.v1.dashboard import router as dashboard_router
from app.api.v1.expenses import router as expenses_router
from app.api.v1.guests import router as guests_router
from app.api.v1.maintenance import router as maintenance_router
from app.api.v1.messages import router as messages_router
from app.api.v1.properties import router as properties_router
from app.api.v1.reports import router as reports_router
from app.core.config import settings
from app.db.init_db import init_storage
from app.storage.service import Storage
from app.whatsapp.router import router as whatsapp_router
from app.whatsapp.service import WhatsAppConfig, WhatsAppService

if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.INFO)

logger = logging.getLogger("staydesk")


def build_whatsapp_service(storage: Storage) -> WhatsAppService:
    service = WhatsAppService(
        storage,
        api_base_url=settings.WHATSAPP_API_BASE_URL,
        api_version=settings.WHATSAPP_API_VERSION,
        timeout=settings.WHATSAPP_HTTP_TIMEOUT,
    )
    if settings.whatsapp_bootstrap_ready:
        service.set_config(
            WhatsAppConfig(
                access_token=settings.WHATSAPP_ACCESS_TOKEN,
                phone_number_id=settings.WHATSAPP_PHONE_NUMBER_ID,
                verify_token=settings.WHATSAPP_VERIFY_TOKEN,
                webhook_url=settings.WHATSAPP_WEBHOOK_URL,
            )
        )
    return service


def create_app(storage: Optional[Storage] = None, whatsapp: Optional[WhatsAppService] = None) -> FastAPI:
    if storage is None:
        from app.db.session import engine

        storage = Storage(engine)
    if whatsapp is None:
        whatsapp = build_whatsapp_service(storage)

    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Gestao de imoveis de temporada: reservas, hospedes, manutencao, despesas e mensagens",
    )
    app.state.storage = storage
    app.state.whatsapp = whatsapp

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def on_startup() -> None:
        init_storage(app.state.storage)
        if settings.ENV.lower() == "production" and settings.SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
            logger.warning("SQLALCHEMY_DATABASE_URI aponta para SQLite em producao.")
        if not app.state.whatsapp.is_configured():
            logger.info("WhatsApp sem configuracao; aguardando POST /api/whatsapp/config")

    app.include_router(properties_router, prefix="/api")
    app.include_router(guests_router, prefix="/api")
    app.include_router(bookings_router, prefix="/api")
    app.include_router(maintenance_router, prefix="/api")
    app.include_router(expenses_router, prefix="/api")
    app.include_router(messages_router, prefix="/api")
    app.include_router(dashboard_router, prefix="/api")
    app.include_router(reports_router, prefix="/api")
    app.include_router(whatsapp_router, prefix="/api")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "request method=%s path=%s status=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
