from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .roles import DEFAULT_PRIORITY_ROLES, PriorityRole, parse_priority_roles


load_dotenv()


def _env_lookup(name: str, aliases: tuple[str, ...] = ()) -> str | None:
    for key in (name, *aliases):
        # Be tolerant to UTF-8 BOM accidentally saved in .env key names.
        for candidate in (key, f"\ufeff{key}"):
            raw = os.getenv(candidate)
            if raw is not None:
                return raw
    return None


def _env_bool(name: str, default: bool, aliases: tuple[str, ...] = ()) -> bool:
    raw = _env_lookup(name, aliases)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int, aliases: tuple[str, ...] = ()) -> int:
    raw = _env_lookup(name, aliases)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_optional_id(name: str, aliases: tuple[str, ...] = ()) -> int | None:
    raw = (_env_lookup(name, aliases) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _env_str(name: str, default: str, aliases: tuple[str, ...] = ()) -> str:
    raw = _env_lookup(name, aliases)
    if raw is None:
        return default
    value = raw.strip()
    return value if value else default


def _env_priority_roles(name: str) -> list[PriorityRole]:
    raw = (_env_lookup(name) or "").strip()
    if not raw:
        return list(DEFAULT_PRIORITY_ROLES)
    return parse_priority_roles(raw)


def _clean_token(value: str) -> str:
    cleaned = value.strip()
    if cleaned.lower().startswith("bot "):
        cleaned = cleaned[4:].strip()
    if (cleaned.startswith('"') and cleaned.endswith('"')) or (
        cleaned.startswith("'") and cleaned.endswith("'")
    ):
        cleaned = cleaned[1:-1].strip()
    return cleaned


@dataclass(slots=True)
class Settings:
    discord_token: str
    discord_guild_id: int | None
    priority_roles: list[PriorityRole] = field(default_factory=lambda: list(DEFAULT_PRIORITY_ROLES))

    sheets_backend: str = "google"
    spreadsheet_id: str = ""
    service_account_email: str = ""
    service_account_private_key: str = ""
    sheets_timeout_seconds: int = 30
    sheets_retry_max_attempts: int = 5
    sheets_retry_base_delay_ms: int = 1000
    sheets_retry_max_delay_ms: int = 15000
    sheets_retry_jitter_ms: int = 250

    role_refresh_concurrency: int = 5
    verify_row_identity: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            discord_token=_clean_token(_env_lookup("DISCORD_TOKEN") or ""),
            discord_guild_id=_env_optional_id("DISCORD_GUILD_ID", aliases=("GUILD_ID",)),
            priority_roles=_env_priority_roles("PRIORITY_ROLES"),
            sheets_backend=_env_str("SHEETS_BACKEND", "google").lower(),
            spreadsheet_id=_env_str("GOOGLE_SHEETS_SPREADSHEET_ID", ""),
            service_account_email=_env_str("GOOGLE_SERVICE_ACCOUNT_EMAIL", ""),
            service_account_private_key=_env_str("GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY", ""),
            sheets_timeout_seconds=_env_int("SHEETS_TIMEOUT_SECONDS", 30),
            sheets_retry_max_attempts=_env_int("SHEETS_RETRY_MAX_ATTEMPTS", 5),
            sheets_retry_base_delay_ms=_env_int("SHEETS_RETRY_BASE_DELAY_MS", 1000),
            sheets_retry_max_delay_ms=_env_int("SHEETS_RETRY_MAX_DELAY_MS", 15000),
            sheets_retry_jitter_ms=_env_int("SHEETS_RETRY_JITTER_MS", 250),
            role_refresh_concurrency=_env_int("ROLE_REFRESH_CONCURRENCY", 5),
            verify_row_identity=_env_bool("LEDGER_VERIFY_ROW_IDENTITY", False),
        )

    def validate(self) -> None:
        if not self.discord_token:
            raise ValueError("DISCORD_TOKEN is required")
        if self.discord_token == "put_your_discord_bot_token_here":
            raise ValueError("DISCORD_TOKEN is still placeholder")
        if not self.priority_roles:
            raise ValueError("PRIORITY_ROLES must list at least one id:Label pair")

        if self.sheets_backend not in {"google", "memory"}:
            raise ValueError("SHEETS_BACKEND must be 'google' or 'memory'")
        if self.sheets_backend == "google":
            if not self.spreadsheet_id:
                raise ValueError("GOOGLE_SHEETS_SPREADSHEET_ID is required")
            if not self.service_account_email:
                raise ValueError("GOOGLE_SERVICE_ACCOUNT_EMAIL is required")
            if not self.service_account_private_key:
                raise ValueError("GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY is required")

        if self.sheets_timeout_seconds < 5:
            raise ValueError("SHEETS_TIMEOUT_SECONDS must be >= 5")
        if self.sheets_retry_max_attempts < 1:
            raise ValueError("SHEETS_RETRY_MAX_ATTEMPTS must be >= 1")
        if self.sheets_retry_base_delay_ms < 0:
            raise ValueError("SHEETS_RETRY_BASE_DELAY_MS must be >= 0")
        if self.sheets_retry_max_delay_ms < self.sheets_retry_base_delay_ms:
            raise ValueError("SHEETS_RETRY_MAX_DELAY_MS must be >= SHEETS_RETRY_BASE_DELAY_MS")
        if self.sheets_retry_jitter_ms < 0:
            raise ValueError("SHEETS_RETRY_JITTER_MS must be >= 0")
        if self.role_refresh_concurrency < 1:
            raise ValueError("ROLE_REFRESH_CONCURRENCY must be >= 1")
