from __future__ import annotations

from typing import Any

from .client import ServiceAccountTokens, SheetsClient
from .memory_table import InMemorySheetsTable
from .retry import RetryPolicy
from .table import SheetsTable


def retry_policy_from_settings(settings: Any) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.sheets_retry_max_attempts,
        base_delay_ms=settings.sheets_retry_base_delay_ms,
        max_delay_ms=settings.sheets_retry_max_delay_ms,
        jitter_ms=settings.sheets_retry_jitter_ms,
    )


def build_table(settings: Any) -> Any:
    backend = str(getattr(settings, "sheets_backend", "google") or "google").strip().lower()
    policy = retry_policy_from_settings(settings)
    if backend == "memory":
        return InMemorySheetsTable(policy=policy)
    if backend != "google":
        raise ValueError("SHEETS_BACKEND must be 'google' or 'memory'")

    tokens = ServiceAccountTokens(settings.service_account_email, settings.service_account_private_key)
    client = SheetsClient(
        spreadsheet_id=settings.spreadsheet_id,
        tokens=tokens,
        timeout_seconds=settings.sheets_timeout_seconds,
    )
    return SheetsTable(client, policy=policy)
