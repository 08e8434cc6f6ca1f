from __future__ import annotations

import logging
from typing import List, Optional

from ...sheets.ranges import DATA_RANGE, FIRST_DATA_ROW
from ..models import LocatedRecord, Location, WalletRecord
from ..partitions import PARTITIONS

logger = logging.getLogger("wallet_role_bot.ledger")


class LedgerLocatorMixin:
    async def _partition_rows(self, partition: str) -> List[LocatedRecord]:
        rows = await self.table.read(partition, DATA_RANGE)
        located: List[LocatedRecord] = []
        for offset, row in enumerate(rows):
            if not row or not any(str(cell).strip() for cell in row):
                continue
            located.append(
                LocatedRecord(
                    location=Location(partition, FIRST_DATA_ROW + offset),
                    record=WalletRecord.from_row(row),
                )
            )
        return located

    async def locate(self, user_id: str) -> Optional[LocatedRecord]:
        # First match wins; a duplicate in a lower-priority sheet stays invisible here.
        for partition in PARTITIONS:
            for located in await self._partition_rows(partition):
                if located.record.user_id == user_id:
                    return located
        return None

    async def locate_all(self) -> List[LocatedRecord]:
        await self.ensure_setup()
        items: List[LocatedRecord] = []
        seen: dict[str, Location] = {}
        for partition in PARTITIONS:
            for located in await self._partition_rows(partition):
                user_id = located.record.user_id
                if user_id and user_id in seen:
                    first = seen[user_id]
                    logger.warning(
                        "User %s stored more than once: %s!%s and %s!%s",
                        user_id,
                        first.partition,
                        first.row_number,
                        located.partition,
                        located.row_number,
                    )
                elif user_id:
                    seen[user_id] = located.location
                items.append(located)
        return items

    async def get_wallet(self, user_id: str) -> Optional[WalletRecord]:
        await self.ensure_setup()
        located = await self.locate(user_id)
        return located.record if located is not None else None

    async def list_wallets(self) -> List[WalletRecord]:
        return [located.record for located in await self.locate_all()]
