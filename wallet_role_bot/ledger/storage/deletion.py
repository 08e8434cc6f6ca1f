from __future__ import annotations

import logging
from collections import defaultdict
from typing import Sequence

from ...sheets.errors import StaleLocationError
from ...sheets.ranges import FIRST_DATA_ROW, row_range
from ..models import DeleteManyResult, Location, WalletRecord
from ..partitions import PARTITIONS, is_partition

logger = logging.getLogger("wallet_role_bot.ledger")


class LedgerDeletionMixin:
    async def _check_row_owner(self, partition: str, row_number: int, expected_user_id: str) -> None:
        rows = await self.table.read(partition, row_range(row_number))
        found = WalletRecord.from_row(rows[0]).user_id if rows else ""
        if found != expected_user_id:
            raise StaleLocationError(partition, row_number, expected_user_id, found)

    async def delete_at(self, partition: str, row_number: int, *, expected_user_id: str | None = None) -> bool:
        """Delete exactly one sheet row.

        ``row_number`` must have been resolved after the last deletion in this
        partition; an outdated one removes whichever row has moved into place.
        Passing ``expected_user_id`` re-reads the row first and refuses to
        delete a row that belongs to someone else.
        """
        if expected_user_id is not None:
            await self._check_row_owner(partition, row_number, expected_user_id)

        deleted = await self.table.delete_rows(partition, row_number)
        if deleted:
            logger.info("Deleted row %s!%s", partition, row_number)
        return deleted

    async def delete_many(self, items: Sequence[Location]) -> DeleteManyResult:
        await self.ensure_setup()
        if not items:
            return DeleteManyResult()

        by_partition: dict[str, set[int]] = defaultdict(set)
        for item in items:
            row_number = item.row_number
            if not is_partition(item.partition) or not isinstance(row_number, int) or row_number < FIRST_DATA_ROW:
                logger.warning("Skipping invalid delete target %s!%s", item.partition, row_number)
                continue
            by_partition[item.partition].add(row_number)

        result = DeleteManyResult()
        for partition in PARTITIONS:
            # Bottom-up so earlier deletes never shift a row still waiting to go.
            for row_number in sorted(by_partition.get(partition, ()), reverse=True):
                if await self.delete_at(partition, row_number):
                    result.deleted += 1
        return result
