# backend/app/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    BRAND_NAME,
    DEFAULT_COUNTRY_CODE,
    DEFAULT_CUSTOMER_TYPE,
    ISSUER_ADDRESS,
    ISSUER_EMAIL,
    ISSUER_PHONE,
)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


_BACKEND_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_INVOICE_DIR = _BACKEND_ROOT / "pdf_data"

logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = _BACKEND_ROOT / ".env"
    logger.info(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Deployment environment name",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./bookings.db",
        description="SQLAlchemy database URL",
    )
    database_pool_size: int = Field(default=10, ge=1)
    database_max_overflow: int = Field(default=10, ge=0)
    database_pool_timeout: int = Field(default=30, ge=1)

    # Invoice rendering
    invoice_storage_dir: Path = Field(
        default=DEFAULT_INVOICE_DIR,
        description="Directory where rendered invoice PDFs are cached",
    )
    issuer_name: str = BRAND_NAME
    issuer_address: str = ISSUER_ADDRESS
    issuer_phone: str = ISSUER_PHONE
    issuer_email: str = ISSUER_EMAIL
    currency_prefix: str = "Rs."

    # Bookings
    default_customer_type: str = DEFAULT_CUSTOMER_TYPE
    default_country_code: str = Field(
        default=DEFAULT_COUNTRY_CODE,
        description="Country calling code assumed for bare 10-digit mobile numbers",
    )

    # WhatsApp Cloud API
    whatsapp_enabled: bool = Field(default=False, alias="WHATSAPP_ENABLED")
    whatsapp_api_base_url: str = Field(
        default="https://graph.facebook.com/v17.0",
        alias="WHATSAPP_API_BASE_URL",
    )
    whatsapp_phone_number_id: str = Field(default="", alias="WHATSAPP_PHONE_NUMBER_ID")
    whatsapp_access_token: SecretStr = Field(
        default=SecretStr(""),
        alias="WHATSAPP_ACCESS_TOKEN",
        description="Bearer token for the Graph API (never logged)",
    )
    whatsapp_invoice_template: str = Field(
        default="purchase_receipt_1", alias="WHATSAPP_INVOICE_TEMPLATE"
    )
    whatsapp_status_template: str = Field(
        default="order_status_update", alias="WHATSAPP_STATUS_TEMPLATE"
    )
    whatsapp_template_language: str = Field(default="en_US", alias="WHATSAPP_TEMPLATE_LANGUAGE")
    whatsapp_timeout_seconds: float = Field(default=10.0, gt=0, alias="WHATSAPP_TIMEOUT_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("default_country_code")
    @classmethod
    def _digits_only(cls, value: str) -> str:
        cleaned = value.strip().lstrip("+")
        if not cleaned.isdigit():
            raise ValueError("default_country_code must contain digits only")
        return cleaned

    @property
    def whatsapp_configured(self) -> bool:
        return bool(
            self.whatsapp_enabled
            and self.whatsapp_phone_number_id
            and self.whatsapp_access_token.get_secret_value()
        )


settings = Settings()
