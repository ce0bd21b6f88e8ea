"""
config.py — Centralized Application Configuration Loader

Purpose:
- Single source of truth for the ROI backend settings.
- Load and validate environment variables from `.env` or OS environment.
- Hold the engine defaults (fallback hourly rate, default frequency unit,
  support ticket cost) so they are named and overridable instead of
  scattered literals.

This module does NOT:
- Perform any calculation.
- Open connections or touch storage.
"""

from pathlib import Path
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: backend/roi_app/core/config.py
# .env should be at: backend/.env
_CONFIG_DIR = Path(__file__).parent  # backend/roi_app/core
_BACKEND_DIR = _CONFIG_DIR.parent.parent  # backend
_ENV_FILE = _BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    _ENV_FILE_PATH = str(_ENV_FILE.resolve())
else:
    # pydantic looks in CWD
    _ENV_FILE_PATH = ".env"

# Kept in sync with roi_app.services.roi.frequency.FREQUENCY_MULTIPLIERS
_KNOWN_FREQUENCY_UNITS = ("hour", "day", "week", "month", "quarter", "year")


class Settings(BaseSettings):
    """
    Settings container for the ROI calculation backend.
    """
    # Engine defaults
    ROI_DEFAULT_HOURLY_RATE: float = Field(
        80.0,
        ge=0,
        description="Hourly rate used when hours were saved but no baseline person has a positive rate",
    )
    ROI_DEFAULT_FREQUENCY_UNIT: str = Field(
        "month",
        description="Frequency unit assumed when a normalized indicator omits frequencyUnit",
    )
    ROI_SUPPORT_TICKET_COST: float = Field(
        50.0,
        ge=0,
        description="Cost of one support ticket used by the satisfaction calculator",
    )

    # Logging
    LOG_LEVEL: str = Field(
        "INFO",
        description="Root log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    ROI_ENGINE_LOG_LEVEL: Optional[str] = Field(
        None,
        description="Level for the calculation engine loggers; unset inherits LOG_LEVEL",
    )

    # API
    API_TITLE: str = Field(
        "ROI Calculation Backend",
        description="Title shown in the OpenAPI docs",
    )
    CORS_ALLOW_ORIGINS: str = Field(
        "*",
        description="Comma-separated list of allowed CORS origins",
    )

    @field_validator("ROI_DEFAULT_FREQUENCY_UNIT", mode="before")
    @classmethod
    def normalize_frequency_unit(cls, v: Any) -> str:
        """Lower-case the unit and reject anything outside the unit table."""
        unit = str(v or "").strip().lower()
        if unit not in _KNOWN_FREQUENCY_UNITS:
            raise ValueError(
                f"ROI_DEFAULT_FREQUENCY_UNIT must be one of {', '.join(_KNOWN_FREQUENCY_UNITS)}; got {v!r}"
            )
        return unit

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def upper_log_level(cls, v: Any) -> str:
        return str(v or "INFO").strip().upper()

    @property
    def cors_origins(self) -> list:
        return [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Shared instance; import `settings` rather than constructing Settings().
settings = Settings()
