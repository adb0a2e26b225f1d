from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from image_proxy.errors import ConfigError

MIN_SECRET_LENGTH = 32
MAX_WIDTH_CEILING = 8192
DEFAULT_MAX_WIDTH = 4096
DEFAULT_CACHE_MAX_AGE = 31_536_000  # one year


def _lenient_int(value: Any, default: int) -> int:
    """Parse an env value as int, falling back to *default* when blank, zero or garbage."""

    if value is None:
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return default
    return parsed or default


class Settings(BaseSettings):
    """Image proxy configuration loaded from ``IMAGE_PROXY_*`` environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_prefix="IMAGE_PROXY_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # Signing
    secret: str = Field(..., min_length=MIN_SECRET_LENGTH, description="HMAC key for proxy URL signatures.")

    # Request bounds
    allowed_origins: Optional[str] = Field(
        default=None,
        description="Comma-separated hostnames; subdomains of an entry are allowed too. Unset means any host.",
    )
    max_width: int = Field(DEFAULT_MAX_WIDTH, description="Largest width (px) a request may ask for.")
    default_width: int = Field(1200, description="Target width when the request has no w parameter.")
    default_quality: int = Field(80, ge=1, le=100)

    # Responses
    cache_max_age: int = Field(DEFAULT_CACHE_MAX_AGE, description="Cache-Control max-age in seconds.")

    # URL building
    public_base_url: str = Field("http://localhost:8000", description="Origin used for absolute proxy URLs.")

    # Upstream fetch
    fetch_timeout: float = Field(10.0, gt=0)
    max_source_bytes: int = Field(20 * 1024 * 1024, ge=1)
    user_agent: str = "Signed-Image-Proxy/1.0"

    @field_validator("max_width", mode="before")
    @classmethod
    def _clamp_max_width(cls, value: Any) -> int:
        return min(MAX_WIDTH_CEILING, max(1, _lenient_int(value, DEFAULT_MAX_WIDTH)))

    @field_validator("cache_max_age", mode="before")
    @classmethod
    def _clamp_cache_max_age(cls, value: Any) -> int:
        return max(0, _lenient_int(value, DEFAULT_CACHE_MAX_AGE))

    @model_validator(mode="after")
    def _fit_default_width(self) -> "Settings":
        self.default_width = min(self.max_width, max(1, self.default_width))
        return self

    @property
    def origin_allowlist(self) -> list[str] | None:
        """Lowercased allowlist entries, or None when every origin is allowed."""

        raw = self.allowed_origins
        if not raw or not raw.strip():
            return None
        entries = [entry.strip().lower() for entry in raw.split(",")]
        return [entry for entry in entries if entry] or None


def load_settings(**overrides: Any) -> Settings:
    """Resolve settings from the environment, raising ConfigError when unusable.

    Not cached: each call re-reads the environment so a running process picks
    up changes without a restart.
    """

    try:
        return Settings(**overrides)
    except ValidationError as exc:
        fields = {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
        if "secret" in fields:
            raise ConfigError(
                f"IMAGE_PROXY_SECRET must be set and at least {MIN_SECRET_LENGTH} characters. "
                "Use: openssl rand -hex 32"
            ) from exc
        raise ConfigError(f"Invalid image proxy configuration: {', '.join(sorted(fields))}") from exc


def get_settings() -> Settings:
    """FastAPI dependency returning freshly resolved settings."""

    return load_settings()
