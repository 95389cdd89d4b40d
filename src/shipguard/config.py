"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="SHIPGUARD_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Ship Date Guard API"
    api_prefix: str = "/api"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=("http://localhost:5173", "http://127.0.0.1:5173"),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Distance matrix service
    origin_address: str = Field(
        default="8610 Cherry Lane, Laurel, Maryland 20707",
        description="Fixed warehouse address every shipping distance is measured from.",
    )
    distance_matrix_url: str = Field(
        default="https://maps.googleapis.com/maps/api/distancematrix/json",
    )
    distance_units: str = "imperial"
    distance_api_key: Optional[str] = Field(
        default=None,
        description="Fallback API key when no configuration table is available.",
    )
    distance_timeout_seconds: float = Field(default=15.0, gt=0.0)
    distance_max_retries: int = Field(default=1, ge=0)
    distance_backoff_seconds: float = Field(default=0.5, ge=0.0)
    min_address_components: int = Field(
        default=2,
        ge=1,
        description="Comma-delimited components a resolved address needs to count as city-level.",
    )
    invalid_city_note: str = "Shipping Distance Error, No Valid City"

    # Blackout calendars
    blackout_enforced_roles: tuple[str, ...] = Field(
        default=(),
        description="Role ids whose ship dates are cleared on a policy violation.",
    )
    special_item_code: str = "00401"
    default_calendar_id: str = "standard"
    alternate_calendar_id: str = "special_item"
    calendar_page_size: int = Field(default=1000, ge=1)
    calendar_date_column: str = "delivery_date"
    calendar_date_formats: tuple[str, ...] = Field(default=("%Y-%m-%d", "%m/%d/%Y"))
    calendar_dir: Path = Field(default=Path("data/calendars"), description="Root of file-based calendars.")
    session_idle_seconds: float = Field(
        default=3600.0,
        gt=0.0,
        description="Editing sessions untouched for this long are discarded with their calendar cache.",
    )

    # Distance policy thresholds
    monday_max_miles: float = Field(default=35.0, ge=0.0)
    extended_band_min_miles: float = Field(default=70.0, ge=0.0)
    extended_band_max_miles: float = Field(default=85.0, ge=0.0)
    extended_band_weekday: int = Field(default=4, ge=0, le=6, description="0=Sunday .. 6=Saturday.")

    # Financing materials flag
    financing_terms_id: str = "8"
    materials_location_id: str = "17"
    materials_asset_account_id: str = "726"

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    calendar_table: str = "blackout_dates"
    config_table: str = "integration_config"
    api_key_column: str = "distance_api_key"
    items_table: str = "items"

    @field_validator("calendar_dir", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator(
        "frontend_allowed_origins",
        "blackout_enforced_roles",
        "calendar_date_formats",
        mode="before",
    )
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return tuple(str(item) for item in value)
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, (int, float)):
            return (str(value),)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("blackout_enforced_roles", mode="after")
    @classmethod
    def _normalize_roles(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        from .models.domain import normalize_identifier

        return tuple(role for role in (normalize_identifier(item) for item in value) if role)


settings = Settings()
