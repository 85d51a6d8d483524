"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables
  - Fall back to a .env file
  - Validate the policy location, country codes and cron expression at startup

Only AppSettings is a BaseSettings instance. Sub-settings are plain BaseModel
classes populated via env_nested_delimiter="__", so PRID__POLICY_LOCATION
maps to prid.policy_location and METADATA__COUNTRIES to metadata.countries
(a JSON object).
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from eidas_bridge.prid.generators import ALGORITHMS, DEFAULT_DESTINATION_COUNTRY

_ENV_FILE = Path(__file__).parent.parent.parent / ".env"

_COUNTRY_CODE = re.compile(r"[A-Za-z]{2}")


class PridSettings(BaseModel):
    """
    PRID policy and generator configuration.

    The reload cron uses the standard 5 fields:
      "*/10 * * * *" — every 10 minutes (default)
      "0 * * * *"    — hourly
    """

    policy_location: str = Field(description="Path, file: URL or http(s):// URL of the PRID policy document")
    destination_country: str = Field(
        default=DEFAULT_DESTINATION_COUNTRY,
        description="Country code expected in the second position of eIDAS person identifiers",
    )
    reload_cron: str = Field(default="*/10 * * * *", description="Cron expression for policy reloads")
    reload_on_startup: bool = Field(default=False)
    algorithms: list[str] = Field(default_factory=lambda: list(ALGORITHMS))

    @field_validator("policy_location")
    @classmethod
    def validate_location(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("PRID policy location must not be empty")
        return value.strip()

    @field_validator("destination_country")
    @classmethod
    def validate_destination_country(cls, value: str) -> str:
        if not _COUNTRY_CODE.fullmatch(value):
            raise ValueError(f"Destination country must be 2 letters, got {value!r}")
        return value.upper()

    @field_validator("reload_cron")
    @classmethod
    def validate_cron(cls, value: str) -> str:
        """Reject expressions that don't have exactly 5 space-separated fields."""
        fields = value.strip().split()
        if len(fields) != 5:
            raise ValueError(
                f"Cron expression must have exactly 5 fields "
                f"(minute hour dom month dow), got {len(fields)}: {value!r}"
            )
        return value.strip()

    @field_validator("algorithms")
    @classmethod
    def validate_algorithms(cls, value: list[str]) -> list[str]:
        known = {name.lower() for name in ALGORITHMS}
        unknown = [name for name in value if name.lower() not in known]
        if unknown:
            raise ValueError(f"Unknown PRID algorithms {unknown}, expected a subset of {list(ALGORITHMS)}")
        if not value:
            raise ValueError("At least one PRID algorithm must be registered")
        return value


class MetadataSettings(BaseModel):
    """Declared eIDAS assurance levels per foreign country."""

    countries: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("countries")
    @classmethod
    def validate_countries(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        bad = [code for code in value if not _COUNTRY_CODE.fullmatch(code)]
        if bad:
            raise ValueError(f"Invalid country codes in metadata: {bad}")
        return {code.upper(): levels for code, levels in value.items()}


class AppSettings(BaseSettings):
    """
    Root application settings — aggregates all sub-settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    prid: PridSettings
    metadata: MetadataSettings = Field(default_factory=lambda: MetadataSettings())

    http_timeout_seconds: int = Field(default=30, ge=1)
    log_level: str = Field(default="INFO")
