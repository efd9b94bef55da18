import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse

from app.api.deps import get_whatsapp
from app.core.config import settings
from app.whatsapp.client import WhatsAppError, WhatsAppNotConfiguredError
from app.whatsapp.schemas import WhatsAppConfigPayload, WhatsAppSendPayload, WhatsAppTemplatePayload
from app.whatsapp.service import WhatsAppConfig, WhatsAppService

logger = logging.getLogger("staydesk.whatsapp")

router = APIRouter(tags=["WhatsApp"])


def _ensure_configured(whatsapp: WhatsAppService) -> None:
    if not whatsapp.is_configured():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="WhatsApp nao configurado")


def _send_response(result: dict) -> dict:
    messages = result.get("messages") or [{}]
    return {"success": True, "messageId": messages[0].get("id"), "status": "sent"}


@router.get("/whatsapp/webhook")
def verify_webhook(
    hub_mode: Optional[str] = Query(None, alias="hub.mode"),
    hub_verify_token: Optional[str] = Query(None, alias="hub.verify_token"),
    hub_challenge: Optional[str] = Query(None, alias="hub.challenge"),
    whatsapp: WhatsAppService = Depends(get_whatsapp),
):
    challenge = whatsapp.verify_webhook(hub_mode, hub_verify_token, hub_challenge)
    if challenge is None:
        logger.warning("whatsapp webhook verification rejected mode=%s", hub_mode)
        return PlainTextResponse("Forbidden", status_code=status.HTTP_403_FORBIDDEN)
    return PlainTextResponse(challenge)


@router.post("/whatsapp/webhook")
async def receive_webhook(request: Request, whatsapp: WhatsAppService = Depends(get_whatsapp)):
    try:
        body = await request.json()
    except ValueError:
        logger.warning("whatsapp webhook with invalid JSON body")
        return PlainTextResponse("EVENT_RECEIVED")

    await run_in_threadpool(whatsapp.process_webhook, body)
    return PlainTextResponse("EVENT_RECEIVED")


@router.post("/whatsapp/config")
def configure_whatsapp(payload: WhatsAppConfigPayload, whatsapp: WhatsAppService = Depends(get_whatsapp)):
    whatsapp.set_config(
        WhatsAppConfig(
            access_token=payload.access_token,
            phone_number_id=payload.phone_number_id,
            verify_token=payload.verify_token,
            webhook_url=str(payload.webhook_url) if payload.webhook_url else None,
        )
    )
    return {"message": "WhatsApp configurado com sucesso"}


@router.get("/whatsapp/status")
def whatsapp_status(whatsapp: WhatsAppService = Depends(get_whatsapp)):
    configured = whatsapp.is_configured()
    profile_summary = None
    if configured:
        try:
            profile = whatsapp.get_business_profile()
            profile_summary = {
                "name": profile.get("name"),
                "status": profile.get("status"),
                "messaging_product": profile.get("messaging_product"),
            }
        except WhatsAppError as exc:
            logger.warning("whatsapp business profile unavailable: %s", exc)
    return {"configured": configured, "profile": profile_summary}


@router.post("/whatsapp/send")
def send_message(payload: WhatsAppSendPayload, whatsapp: WhatsAppService = Depends(get_whatsapp)):
    _ensure_configured(whatsapp)
    try:
        result = whatsapp.send_text_message(payload.to, payload.message, payload.guest_id, payload.booking_id)
    except WhatsAppNotConfiguredError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="WhatsApp nao configurado")
    except WhatsAppError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return _send_response(result)


@router.post("/whatsapp/send-template")
def send_template(payload: WhatsAppTemplatePayload, whatsapp: WhatsAppService = Depends(get_whatsapp)):
    _ensure_configured(whatsapp)
    try:
        result = whatsapp.send_template_message(
            payload.to,
            payload.template_name,
            payload.language_code or settings.WHATSAPP_DEFAULT_LANGUAGE,
            payload.parameters,
            payload.guest_id,
            payload.booking_id,
        )
    except WhatsAppNotConfiguredError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="WhatsApp nao configurado")
    except WhatsAppError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return _send_response(result)
