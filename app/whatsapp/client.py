import logging
from typing import Optional

import httpx


class WhatsAppError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class WhatsAppNotConfiguredError(WhatsAppError):
    def __init__(self) -> None:
        super().__init__("WhatsApp nao configurado")


logger = logging.getLogger("staydesk.whatsapp")


def _extract_error_message(res: httpx.Response) -> str:
    try:
        payload = res.json()
    except Exception:
        return res.text
    if isinstance(payload, dict):
        err = payload.get("error") or {}
        if isinstance(err, dict) and err.get("message"):
            return err["message"]
        return payload.get("message") or res.text
    return res.text


class GraphClient:
    """Thin httpx wrapper around the WhatsApp Cloud (Graph) API."""

    def __init__(
        self,
        base_url: str,
        api_version: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self._transport = transport

    def url(self, *parts: str) -> str:
        return "/".join([self.base_url, self.api_version, *parts])

    def _client(self, access_token: str) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout,
            transport=self._transport,
            headers={"Authorization": f"Bearer {access_token}"},
        )

    def _send(self, access_token: str, method: str, url: str, body: Optional[dict] = None) -> dict:
        try:
            with self._client(access_token) as client:
                res = client.request(method, url, json=body)
        except httpx.HTTPError as exc:
            logger.error("whatsapp request failed method=%s url=%s error=%s", method, url, exc)
            raise WhatsAppError(str(exc) or "Falha na chamada ao WhatsApp") from exc
        if res.status_code >= 400:
            message = _extract_error_message(res)
            logger.error("whatsapp api error status_code=%s message=%s", res.status_code, message)
            raise WhatsAppError(message, status_code=res.status_code)
        try:
            return res.json()
        except ValueError as exc:
            raise WhatsAppError("Resposta invalida do WhatsApp", status_code=res.status_code) from exc

    def post(self, access_token: str, url: str, body: dict) -> dict:
        return self._send(access_token, "POST", url, body)

    def get(self, access_token: str, url: str) -> dict:
        return self._send(access_token, "GET", url)
