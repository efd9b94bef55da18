import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from app.services.phone import normalize_phone, phones_match
from app.storage import schemas
from app.storage.service import Storage
from app.whatsapp.client import GraphClient, WhatsAppNotConfiguredError

logger = logging.getLogger("staydesk.whatsapp")

MEDIA_PLACEHOLDERS = {
    "image": "[Imagem]",
    "document": "[Documento]",
    "audio": "[Áudio]",
}
UNSUPPORTED_PLACEHOLDER = "[Mensagem não suportada]"


@dataclass
class WhatsAppConfig:
    access_token: str
    phone_number_id: str
    verify_token: str
    webhook_url: Optional[str] = None


def _incoming_content(message: dict) -> str:
    text = message.get("text")
    if text:
        return text.get("body", "")
    for kind, label in MEDIA_PLACEHOLDERS.items():
        if message.get(kind):
            return label
    return UNSUPPORTED_PLACEHOLDER


def _provider_message_id(response: dict) -> Optional[str]:
    try:
        return response["messages"][0]["id"]
    except (KeyError, IndexError, TypeError):
        logger.warning("whatsapp send accepted without message id response=%s", response)
        return None


class WhatsAppService:
    """Integration with the WhatsApp Business API.

    Outbound sends are recorded as ``Message`` rows once the provider accepts
    them. Inbound webhook payloads are normalized into incoming messages and
    delivery receipts update the stored ``whatsapp_status``; webhook
    processing never raises.
    """

    def __init__(
        self,
        storage: Storage,
        api_base_url: str = "https://graph.facebook.com",
        api_version: str = "v18.0",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.storage = storage
        self.graph = GraphClient(api_base_url, api_version, timeout=timeout, transport=transport)
        self._config: Optional[WhatsAppConfig] = None

    @property
    def config(self) -> Optional[WhatsAppConfig]:
        return self._config

    def set_config(self, config: WhatsAppConfig) -> None:
        self._config = config
        logger.info("whatsapp configured phone_number_id=%s", config.phone_number_id)

    def is_configured(self) -> bool:
        return bool(self._config and self._config.access_token and self._config.phone_number_id)

    def _require_config(self) -> WhatsAppConfig:
        if not self.is_configured():
            raise WhatsAppNotConfiguredError()
        return self._config

    def _record_outgoing(
        self,
        config: WhatsAppConfig,
        to: str,
        content: str,
        provider_id: Optional[str],
        guest_id: Optional[str],
        booking_id: Optional[str],
    ) -> None:
        # Provider already accepted the message; write errors are only logged.
        try:
            self.storage.create_message(
                schemas.MessageCreate(
                    content=content,
                    type="general",
                    channel="whatsapp",
                    direction="outgoing",
                    to_number=to,
                    from_number=config.phone_number_id,
                    whatsapp_message_id=provider_id,
                    whatsapp_status="sent",
                    guest_id=guest_id or None,
                    booking_id=booking_id or None,
                    is_read=False,
                )
            )
        except Exception:
            logger.exception("Erro ao registrar mensagem enviada via WhatsApp to=%s", to)

    def send_text_message(
        self,
        to: str,
        message: str,
        guest_id: Optional[str] = None,
        booking_id: Optional[str] = None,
    ) -> dict:
        config = self._require_config()
        body = {
            "messaging_product": "whatsapp",
            "to": to,
            "text": {"body": message},
        }
        response = self.graph.post(config.access_token, self.graph.url(config.phone_number_id, "messages"), body)
        self._record_outgoing(config, to, message, _provider_message_id(response), guest_id, booking_id)
        return response

    def send_template_message(
        self,
        to: str,
        template_name: str,
        language_code: str = "pt_BR",
        parameters: Optional[list[str]] = None,
        guest_id: Optional[str] = None,
        booking_id: Optional[str] = None,
    ) -> dict:
        config = self._require_config()
        template: dict[str, Any] = {
            "name": template_name,
            "language": {"code": language_code},
        }
        if parameters:
            template["components"] = [
                {
                    "type": "body",
                    "parameters": [{"type": "text", "text": param} for param in parameters],
                }
            ]
        body = {
            "messaging_product": "whatsapp",
            "to": to,
            "type": "template",
            "template": template,
        }
        response = self.graph.post(config.access_token, self.graph.url(config.phone_number_id, "messages"), body)
        self._record_outgoing(
            config, to, f"Template: {template_name}", _provider_message_id(response), guest_id, booking_id
        )
        return response

    def verify_webhook(self, mode: Optional[str], token: Optional[str], challenge: Optional[str]) -> Optional[str]:
        if not self._config:
            return None
        if mode == "subscribe" and token == self._config.verify_token:
            return challenge
        return None

    def _find_guest_by_phone(self, phone: str) -> Optional[schemas.Guest]:
        for guest in self.storage.list_guests():
            if phones_match(guest.phone, phone):
                return guest
        return None

    def process_incoming_message(self, value: dict) -> Optional[schemas.Message]:
        try:
            messages = value.get("messages") or []
            if not messages:
                return None
            message = messages[0]
            contacts = value.get("contacts") or []
            contact_id = contacts[0].get("wa_id") if contacts else None
            from_number = contact_id or message.get("from") or ""

            guest = self._find_guest_by_phone(from_number)
            stored = self.storage.create_message(
                schemas.MessageCreate(
                    content=_incoming_content(message),
                    type="general",
                    channel="whatsapp",
                    direction="incoming",
                    from_number=from_number,
                    to_number=self._config.phone_number_id if self._config else "",
                    whatsapp_message_id=message.get("id"),
                    whatsapp_status="received",
                    guest_id=guest.id if guest else None,
                    booking_id=None,
                    is_read=False,
                )
            )
            logger.info(
                "whatsapp message processed id=%s from=%s guest_id=%s",
                message.get("id"),
                normalize_phone(from_number),
                stored.guest_id,
            )
            return stored
        except Exception:
            logger.exception("Erro ao processar mensagem recebida do WhatsApp")
            return None

    def process_status_update(self, value: dict) -> Optional[schemas.Message]:
        try:
            statuses = value.get("statuses") or []
            if not statuses:
                return None
            status = statuses[0]
            updated = self.storage.update_whatsapp_status(status.get("id"), status.get("status"))
            if updated is None:
                logger.info("whatsapp status for unknown message id=%s status=%s", status.get("id"), status.get("status"))
                return None
            logger.info("whatsapp status updated id=%s status=%s", status.get("id"), status.get("status"))
            return updated
        except Exception:
            logger.exception("Erro ao processar status do WhatsApp")
            return None

    def process_webhook(self, body: Any) -> None:
        """Dispatch a webhook delivery. Malformed payloads are logged and dropped."""
        if not isinstance(body, dict) or body.get("object") != "whatsapp_business_account":
            return
        try:
            entries = body.get("entry") or []
            if not isinstance(entries, list):
                logger.warning("whatsapp webhook with malformed entry list")
                return
            for entry in entries:
                changes = entry.get("changes") if isinstance(entry, dict) else None
                if not isinstance(changes, list):
                    continue
                for change in changes:
                    if not isinstance(change, dict) or change.get("field") != "messages":
                        continue
                    value = change.get("value")
                    if not isinstance(value, dict):
                        continue
                    if value.get("messages"):
                        self.process_incoming_message(value)
                    if value.get("statuses"):
                        self.process_status_update(value)
        except Exception:
            logger.exception("Payload de webhook do WhatsApp malformado")

    def get_business_profile(self) -> dict:
        config = self._require_config()
        return self.graph.get(config.access_token, self.graph.url(config.phone_number_id))
