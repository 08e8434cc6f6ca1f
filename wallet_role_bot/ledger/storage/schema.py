from __future__ import annotations

import logging
from typing import Any

from ...sheets.ranges import HEADER_RANGE
from ..partitions import HEADER_ROW, PARTITIONS

logger = logging.getLogger("wallet_role_bot.ledger")


class LedgerSchemaMixin:
    def __init__(self, table: Any, *, verify_row_identity: bool = False) -> None:
        self.table = table
        self.verify_row_identity = verify_row_identity

    async def ensure_setup(self) -> None:
        existing = set(await self.table.list_partitions())
        missing = [name for name in PARTITIONS if name not in existing]
        if missing:
            logger.info("Creating missing sheets: %s", ", ".join(missing))
            await self.table.create_partitions(missing)

        for partition in PARTITIONS:
            current = await self.table.read(partition, HEADER_RANGE)
            first_row = current[0] if current else []
            if list(first_row) != list(HEADER_ROW):
                logger.info("Writing header row for %s", partition)
                await self.table.write(partition, HEADER_RANGE, [list(HEADER_ROW)])
