from __future__ import annotations

from .storage.batch import LedgerBatchMixin
from .storage.deletion import LedgerDeletionMixin
from .storage.locator import LedgerLocatorMixin
from .storage.schema import LedgerSchemaMixin
from .storage.upsert import LedgerUpsertMixin


class WalletLedger(
    LedgerSchemaMixin,
    LedgerLocatorMixin,
    LedgerDeletionMixin,
    LedgerUpsertMixin,
    LedgerBatchMixin,
):
    """Three role sheets treated as one wallet table, one row per user."""

    @property
    def backend_name(self) -> str:
        return str(getattr(self.table, "backend_name", "") or "sheets")

    async def start(self) -> None:
        start_fn = getattr(self.table, "start", None)
        if callable(start_fn):
            await start_fn()

    async def close(self) -> None:
        close_fn = getattr(self.table, "close", None)
        if callable(close_fn):
            await close_fn()
