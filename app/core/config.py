import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


class Settings:
    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent.parent.parent
        self.APP_NAME: str = os.getenv("APP_NAME", "StayDesk API")
        self.ENV: str = os.getenv("ENV", "development")
        self.SQLALCHEMY_DATABASE_URI: str = os.getenv(
            "SQLALCHEMY_DATABASE_URI",
            f"sqlite:///{(base_dir / 'staydesk.db').as_posix()}",
        )
        self.SEED_DEFAULT_PROPERTY: bool = _env_flag("SEED_DEFAULT_PROPERTY", "1")

        self.WHATSAPP_API_BASE_URL: str = os.getenv("WHATSAPP_API_BASE_URL", "https://graph.facebook.com")
        self.WHATSAPP_API_VERSION: str = os.getenv("WHATSAPP_API_VERSION", "v18.0")
        self.WHATSAPP_HTTP_TIMEOUT: float = float(os.getenv("WHATSAPP_HTTP_TIMEOUT", "10"))
        self.WHATSAPP_DEFAULT_LANGUAGE: str = os.getenv("WHATSAPP_DEFAULT_LANGUAGE", "pt_BR")
        self.WHATSAPP_ACCESS_TOKEN: Optional[str] = os.getenv("WHATSAPP_ACCESS_TOKEN")
        self.WHATSAPP_PHONE_NUMBER_ID: Optional[str] = os.getenv("WHATSAPP_PHONE_NUMBER_ID")
        self.WHATSAPP_VERIFY_TOKEN: Optional[str] = os.getenv("WHATSAPP_VERIFY_TOKEN")
        self.WHATSAPP_WEBHOOK_URL: Optional[str] = os.getenv("WHATSAPP_WEBHOOK_URL")

        default_cors = [
            "http://localhost",
            "http://localhost:3000",
            "http://localhost:5000",
            "http://localhost:5173",
            "http://127.0.0.1",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5000",
            "http://127.0.0.1:5173",
        ]
        cors_origins = os.getenv("BACKEND_CORS_ORIGINS")
        self.BACKEND_CORS_ORIGINS: List[str] = (
            [origin.strip() for origin in cors_origins.split(",") if origin.strip()]
            if cors_origins
            else default_cors
        )

    @property
    def whatsapp_bootstrap_ready(self) -> bool:
        return bool(self.WHATSAPP_ACCESS_TOKEN and self.WHATSAPP_PHONE_NUMBER_ID and self.WHATSAPP_VERIFY_TOKEN)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
