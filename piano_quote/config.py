"""Environment-driven configuration for the piano quote service."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _env(name: str, default: str = "", required: bool = False) -> str:
    value = os.getenv(name, default).strip()
    if required and not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in _env(name, default).split(",") if item.strip()]


def _env_bool(name: str, default: str = "false") -> bool:
    return _env(name, default).lower() in ("1", "true", "yes")


class Settings(BaseModel):
    supabase_url: str
    supabase_key: str
    storage_bucket: str = "piano-quotes"
    quotes_table: str = "quotes"

    resend_api_key: str
    resend_base_url: str = "https://api.resend.com"

    business_from: str = "Piano Quote <quotes@pianomoveteam.co.uk>"
    business_to: list[str] = Field(default_factory=lambda: ["thenorthpiano@googlemail.com"])
    business_cc: list[str] = Field(default_factory=lambda: ["gogoo.ltd@gmail.com"])
    customer_from: str = "Piano Move Team <noreply@pianomoveteam.co.uk>"
    thread_domain: str = "pianomoveteam.co.uk"

    # When false a failed row insert is logged and the emails still go out.
    require_persistence: bool = False

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> "Settings":
        load_dotenv(dotenv_path)
        supabase_key = _env("SUPABASE_SERVICE_KEY") or _env("SUPABASE_ANON_KEY")
        if not supabase_key:
            raise RuntimeError(
                "Missing required environment variable: SUPABASE_SERVICE_KEY or SUPABASE_ANON_KEY"
            )
        return cls(
            supabase_url=_env("SUPABASE_URL", required=True),
            supabase_key=supabase_key,
            storage_bucket=_env("SUPABASE_BUCKET", "piano-quotes"),
            quotes_table=_env("SUPABASE_QUOTES_TABLE", "quotes"),
            resend_api_key=_env("RESEND_API_KEY", required=True),
            resend_base_url=_env("RESEND_BASE_URL", "https://api.resend.com"),
            business_from=_env("BUSINESS_FROM", "Piano Quote <quotes@pianomoveteam.co.uk>"),
            business_to=_env_list("BUSINESS_TO", "thenorthpiano@googlemail.com"),
            business_cc=_env_list("BUSINESS_CC", "gogoo.ltd@gmail.com"),
            customer_from=_env("CUSTOMER_FROM", "Piano Move Team <noreply@pianomoveteam.co.uk>"),
            thread_domain=_env("THREAD_DOMAIN", "pianomoveteam.co.uk"),
            require_persistence=_env_bool("REQUIRE_PERSISTENCE"),
        )
