from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Protocol, Sequence, TypeVar

from .client import SheetsClient
from .ranges import DATA_RANGE, qualified
from .retry import RetryPolicy, call_with_retry

logger = logging.getLogger("wallet_role_bot.sheets")

T = TypeVar("T")


class TableClient(Protocol):
    """Everything the ledger is allowed to do to the remote spreadsheet."""

    async def read(self, partition: str, row_range: str) -> List[List[str]]: ...

    async def write(self, partition: str, row_range: str, rows: Sequence[Sequence[str]]) -> None: ...

    async def append(self, partition: str, rows: Sequence[Sequence[str]]) -> None: ...

    async def delete_rows(self, partition: str, row_number: int) -> bool: ...

    async def list_partitions(self) -> List[str]: ...

    async def create_partitions(self, names: Sequence[str]) -> None: ...

    async def create_partition(self, name: str) -> None: ...


class SheetsTable:
    """Google Sheets backed table client; every remote call goes through the retry policy."""

    backend_name = "google"

    def __init__(
        self,
        client: SheetsClient,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[object]] | None = None,
    ) -> None:
        self.client = client
        self.policy = policy or RetryPolicy()
        self._sleep = sleep or asyncio.sleep

    async def start(self) -> None:
        await self.client.start()

    async def close(self) -> None:
        await self.client.close()

    async def _call(self, request_fn: Callable[[], Awaitable[T]], description: str) -> T:
        return await call_with_retry(request_fn, description, policy=self.policy, sleep=self._sleep)

    async def _sheet_properties(self) -> List[dict[str, Any]]:
        metadata = await self._call(self.client.get_metadata, "spreadsheets.get")
        sheets = metadata.get("sheets") or []
        return [sheet.get("properties") or {} for sheet in sheets]

    async def read(self, partition: str, row_range: str) -> List[List[str]]:
        rng = qualified(partition, row_range)
        return await self._call(lambda: self.client.get_values(rng), f"values.get {rng}")

    async def write(self, partition: str, row_range: str, rows: Sequence[Sequence[str]]) -> None:
        rng = qualified(partition, row_range)
        await self._call(lambda: self.client.update_values(rng, rows), f"values.update {rng}")

    async def append(self, partition: str, rows: Sequence[Sequence[str]]) -> None:
        # Not idempotent: a retry after a lost acknowledgement can duplicate rows.
        rng = qualified(partition, DATA_RANGE)
        await self._call(lambda: self.client.append_values(rng, rows), f"values.append {rng}")

    async def delete_rows(self, partition: str, row_number: int) -> bool:
        properties = await self._sheet_properties()
        sheet = next((p for p in properties if p.get("title") == partition), None)
        if sheet is None:
            logger.warning("Cannot delete %s!%s: sheet does not exist", partition, row_number)
            return False

        request = {
            "deleteDimension": {
                "range": {
                    "sheetId": sheet.get("sheetId"),
                    "dimension": "ROWS",
                    "startIndex": row_number - 1,
                    "endIndex": row_number,
                },
            },
        }
        await self._call(lambda: self.client.batch_update([request]), f"batchUpdate delete {partition}!{row_number}")
        return True

    async def list_partitions(self) -> List[str]:
        properties = await self._sheet_properties()
        return [str(p.get("title")) for p in properties if p.get("title")]

    async def create_partitions(self, names: Sequence[str]) -> None:
        if not names:
            return
        requests = [{"addSheet": {"properties": {"title": name}}} for name in names]
        await self._call(lambda: self.client.batch_update(requests), "batchUpdate create sheets")

    async def create_partition(self, name: str) -> None:
        await self.create_partitions([name])
