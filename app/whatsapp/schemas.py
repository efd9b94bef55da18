from typing import Optional

from pydantic import AnyUrl, Field, field_validator

from app.storage.schemas import ApiModel


class WhatsAppConfigPayload(ApiModel):
    access_token: str = Field(..., min_length=1)
    phone_number_id: str = Field(..., min_length=1)
    verify_token: str = Field(..., min_length=1)
    webhook_url: Optional[AnyUrl] = None


class WhatsAppSendPayload(ApiModel):
    to: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    guest_id: Optional[str] = None
    booking_id: Optional[str] = None


class WhatsAppTemplatePayload(ApiModel):
    to: str = Field(..., min_length=1)
    template_name: str = Field(..., min_length=1)
    language_code: Optional[str] = None
    parameters: Optional[list[str]] = None
    guest_id: Optional[str] = None
    booking_id: Optional[str] = None

    @field_validator("template_name")
    @classmethod
    def validate_template_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Nome do template obrigatorio")
        return cleaned
