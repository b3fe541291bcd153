from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from decimal import Decimal
from pydantic import field_validator

class Settings(BaseSettings):
    # Upstream PayTo API
    PAYTO_API_URL: str = 'http://localhost:8000/api/v1'
    PAYTO_API_TIMEOUT: float = 30.0
    PAYTO_API_KEY: Optional[str] = None

    # Fiscal defaults (Argentina)
    DEFAULT_VAT_RATE: Decimal = Decimal("21")
    DEFAULT_CURRENCY: str = "ARS"
    LOCALE: str = "es-AR"

    # Pagination
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGES: int = 100

    # Company selector cache
    COMPANY_CACHE_TTL_SECONDS: float = 300.0
    COMPANY_CACHE_MAX_ENTRIES: int = 100

    # Front-end
    FRONTEND_URL: str = 'http://localhost:3000'

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    @property
    def api_base_url(self) -> str:
        return self.PAYTO_API_URL.rstrip("/")

    model_config = SettingsConfigDict(
        extra="allow",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("DEBUG", mode="before")
    @classmethod
    def parse_debug(cls, v):
        if isinstance(v, str):
            return v.lower().strip('"').strip("'") in ("true", "1", "yes", "on")
        return bool(v)

    @field_validator("DEFAULT_VAT_RATE", mode="before")
    @classmethod
    def parse_vat_rate(cls, v):
        if isinstance(v, str):
            return Decimal(v.strip('"').strip("'").replace(",", "."))
        return v

settings = Settings()
