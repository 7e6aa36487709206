"""
Application settings.

Loaded once from the environment (``.env`` at the project root is read
first) and passed explicitly to `create_app`. Nothing else in the API reads
credentials from the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"


@dataclass(frozen=True, slots=True)
class Settings:
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    admin_email: Optional[str]
    admin_password: Optional[str]
    jwt_secret: Optional[str]
    jwt_ttl_hours: int = 24
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    default_currency: str = "usd"
    cors_origins: Tuple[str, ...] = ("*",)
    event_image_bucket: str = "event-images"
    log_level: str = "INFO"

    def require_auth(self) -> None:
        """Fail fast when admin login cannot work."""

        missing = [
            name
            for name, value in (
                ("ADMIN_EMAIL", self.admin_email),
                ("ADMIN_PASSWORD", self.admin_password),
                ("JWT_SECRET", self.jwt_secret),
            )
            if not value
        ]
        if missing:
            raise RuntimeError(
                f"Missing environment variable(s): {', '.join(missing)}. "
                "Admin authentication requires all of them."
            )


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from ``environ`` (defaults to ``os.environ`` after loading .env)."""

    if environ is None:
        load_dotenv(dotenv_path=env_path)
        environ = os.environ

    def get(name: str) -> Optional[str]:
        return _blank_to_none(environ.get(name))

    ttl = get("JWT_TTL_HOURS")
    try:
        jwt_ttl_hours = int(ttl) if ttl else 24
    except ValueError as e:
        raise RuntimeError(f"JWT_TTL_HOURS must be an integer, got {ttl!r}") from e

    origins = tuple(
        origin.strip() for origin in (get("CORS_ORIGINS") or "*").split(",") if origin.strip()
    )

    return Settings(
        supabase_url=get("SUPABASE_URL"),
        supabase_key=get("SUPABASE_KEY"),
        admin_email=get("ADMIN_EMAIL"),
        admin_password=get("ADMIN_PASSWORD"),
        jwt_secret=get("JWT_SECRET"),
        jwt_ttl_hours=jwt_ttl_hours,
        stripe_secret_key=get("STRIPE_SECRET_KEY"),
        stripe_webhook_secret=get("STRIPE_WEBHOOK_SECRET"),
        default_currency=(get("DEFAULT_CURRENCY") or "usd").lower(),
        cors_origins=origins or ("*",),
        event_image_bucket=get("EVENT_IMAGE_BUCKET") or "event-images",
        log_level=(get("LOG_LEVEL") or "INFO").upper(),
    )


__all__ = ["Settings", "load_settings"]
