from __future__ import annotations

import logging

from ...sheets.ranges import row_range
from ..models import INSERTED, SKIPPED, UPDATED, Location, UpsertResult, WalletRecord
from ..partitions import resolve_partition

logger = logging.getLogger("wallet_role_bot.ledger")


class LedgerUpsertMixin:
    async def _move(
        self,
        source: Location,
        target: str,
        row: list[str],
        *,
        expected_user_id: str | None = None,
    ) -> None:
        """Delete the row at ``source`` and append ``row`` to ``target``.

        ``source`` is trusted as the user's one location; other rows of the
        same user elsewhere are left alone.
        """
        logger.info(
            "Moving user %s from %s to %s",
            row[1] if len(row) > 1 else "",
            source.partition,
            target,
        )
        await self.delete_at(source.partition, source.row_number, expected_user_id=expected_user_id)
        await self.table.append(target, [row])

    async def upsert(self, record: WalletRecord, role_label: str | None) -> UpsertResult:
        await self.ensure_setup()

        target = resolve_partition(role_label)
        if target is None:
            return UpsertResult(SKIPPED, "no_priority_role")

        row = WalletRecord(
            username=record.username,
            user_id=record.user_id,
            wallet_address=record.wallet_address,
            role_label=role_label or "",
        ).as_row()

        existing = await self.locate(record.user_id)
        if existing is None:
            await self.table.append(target, [row])
            return UpsertResult(INSERTED)

        if existing.partition != target:
            await self._move(existing.location, target, row)
            return UpsertResult(INSERTED)

        await self.table.write(target, row_range(existing.row_number), [row])
        return UpsertResult(UPDATED)

    async def update_role(self, user_id: str, role_label: str | None) -> bool:
        existing = await self.get_wallet(user_id)
        if existing is None:
            return False
        await self.upsert(existing, role_label)
        return True
