from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import streamlit as st
from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"

CASHFREE_BASE_URLS = {
    "SANDBOX": "https://sandbox.cashfree.com/pg",
    "PRODUCTION": "https://api.cashfree.com/pg",
}


@dataclass(frozen=True)
class Settings:
    database_url: str | None = None
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-1.5-flash"
    gemini_image_model: str = "gemini-2.0-flash-exp"
    cashfree_app_id: str | None = None
    cashfree_secret_key: str | None = None
    cashfree_env: str = "SANDBOX"
    app_url: str = "http://localhost:8501"
    smtp_host: str = "smtp.hostinger.com"
    smtp_port: int = 465
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_from_email: str | None = None
    contact_inbox: str = "contact.us@jurniqcareers.com"
    google_maps_api_key: str | None = None
    log_level: str = "INFO"

    @property
    def cashfree_base_url(self) -> str:
        return CASHFREE_BASE_URLS.get(self.cashfree_env.upper(), CASHFREE_BASE_URLS["SANDBOX"])


def _secret(key: str) -> str | None:
    # st.secrets raises when no secrets.toml exists; treat that as "not set".
    try:
        if key in st.secrets:
            value = str(st.secrets[key]).strip()
            return value or None
        lowered = key.lower()
        if lowered in st.secrets:
            value = str(st.secrets[lowered]).strip()
            return value or None
    except Exception:
        return None
    return None


def get_value(key: str, default: Any = None) -> Any:
    value = os.getenv(key)
    if value is not None and value.strip():
        return value.strip()
    secret = _secret(key)
    if secret is not None:
        return secret
    return default


def load_settings() -> Settings:
    defaults = Settings()
    port_raw = get_value("SMTP_PORT", defaults.smtp_port)
    try:
        smtp_port = int(port_raw)
    except (TypeError, ValueError):
        smtp_port = defaults.smtp_port
    return Settings(
        database_url=get_value("DATABASE_URL"),
        gemini_api_key=get_value("GEMINI_API_KEY"),
        gemini_model=get_value("GEMINI_MODEL", defaults.gemini_model),
        gemini_image_model=get_value("GEMINI_IMAGE_MODEL", defaults.gemini_image_model),
        cashfree_app_id=get_value("CASHFREE_APP_ID"),
        cashfree_secret_key=get_value("CASHFREE_SECRET_KEY"),
        cashfree_env=str(get_value("CASHFREE_ENV", defaults.cashfree_env)).upper(),
        app_url=str(get_value("APP_URL", defaults.app_url)).rstrip("/"),
        smtp_host=get_value("SMTP_HOST", defaults.smtp_host),
        smtp_port=smtp_port,
        smtp_username=get_value("SMTP_USERNAME"),
        smtp_password=get_value("SMTP_PASSWORD"),
        smtp_from_email=get_value("SMTP_FROM_EMAIL") or get_value("SMTP_USERNAME"),
        contact_inbox=get_value("CONTACT_INBOX", defaults.contact_inbox),
        google_maps_api_key=get_value("GOOGLE_MAPS_API_KEY"),
        log_level=str(get_value("LOG_LEVEL", defaults.log_level)).upper(),
    )


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format=LOG_FORMAT,
    )
