from fastapi import Request

from app.storage.service import Storage
from app.whatsapp.service import WhatsAppService


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_whatsapp(request: Request) -> WhatsAppService:
    return request.app.state.whatsapp
