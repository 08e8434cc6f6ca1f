from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, List, Sequence, TypeVar

from .errors import SheetsApiError, SheetsRateLimitError
from .ranges import parse_range
from .retry import RetryPolicy, call_with_retry

T = TypeVar("T")


def _trim(row: Sequence[str]) -> List[str]:
    cells = [str(cell) for cell in row]
    while cells and cells[-1] == "":
        cells.pop()
    return cells


class InMemorySheetsTable:
    """Process-local stand-in for the spreadsheet with the same client contract.

    Reads come back the way the Sheets API returns them: trailing blank cells
    trimmed and trailing blank rows dropped. Row 1 is the header row, so the
    sheet row number of ``grid[i]`` is ``i + 1``.
    """

    backend_name = "memory"

    def __init__(
        self,
        partitions: Dict[str, List[List[str]]] | None = None,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[object]] | None = None,
    ) -> None:
        self.grids: Dict[str, List[List[str]]] = {
            name: [list(row) for row in rows] for name, rows in (partitions or {}).items()
        }
        self.policy = policy or RetryPolicy(max_attempts=5, base_delay_ms=0, max_delay_ms=0, jitter_ms=0)
        self._sleep = sleep or asyncio.sleep
        self.calls: List[tuple] = []
        self.pending_rate_limits = 0

    async def start(self) -> None:
        return

    async def close(self) -> None:
        return

    def fail_next_calls(self, count: int) -> None:
        """Make the next ``count`` remote calls fail as rate limited."""
        self.pending_rate_limits = max(0, int(count))

    async def _call(self, request_fn: Callable[[], T], description: str) -> T:
        async def attempt() -> T:
            if self.pending_rate_limits > 0:
                self.pending_rate_limits -= 1
                raise SheetsRateLimitError(429, "RESOURCE_EXHAUSTED", f"{description}: quota exceeded")
            return request_fn()

        return await call_with_retry(attempt, description, policy=self.policy, sleep=self._sleep)

    def _grid(self, partition: str) -> List[List[str]]:
        grid = self.grids.get(partition)
        if grid is None:
            raise SheetsApiError(400, "INVALID_ARGUMENT", f"Unable to parse range: {partition}")
        return grid

    def rows(self, partition: str) -> List[List[str]]:
        """Data rows of a partition as stored, without the header."""
        return [list(row) for row in self.grids.get(partition, [])[1:]]

    def _read(self, partition: str, row_range: str) -> List[List[str]]:
        grid = self._grid(partition)
        col_start, row_start, col_end, row_end = parse_range(row_range)
        last = len(grid) if row_end is None else min(row_end, len(grid))
        values = [_trim(grid[i - 1][col_start : col_end + 1]) for i in range(row_start, last + 1)]
        while values and not values[-1]:
            values.pop()
        return values

    def _write(self, partition: str, row_range: str, rows: Sequence[Sequence[str]]) -> None:
        grid = self._grid(partition)
        col_start, row_start, _col_end, _row_end = parse_range(row_range)
        for offset, row in enumerate(rows):
            index = row_start - 1 + offset
            while len(grid) <= index:
                grid.append([])
            target = grid[index]
            while len(target) < col_start + len(row):
                target.append("")
            for col, value in enumerate(row):
                target[col_start + col] = str(value)

    def _append(self, partition: str, rows: Sequence[Sequence[str]]) -> None:
        grid = self._grid(partition)
        if not grid:
            grid.append([])
        while len(grid) > 1 and not any(grid[-1]):
            grid.pop()
        grid.extend([str(value) for value in row] for row in rows)

    def _delete(self, partition: str, row_number: int) -> bool:
        grid = self.grids.get(partition)
        if grid is None:
            return False
        if row_number < 1 or row_number > len(grid):
            raise SheetsApiError(400, "INVALID_ARGUMENT", f"Row {row_number} is outside the grid of {partition}")
        del grid[row_number - 1]
        return True

    def _create(self, names: Sequence[str]) -> None:
        for name in names:
            if name in self.grids:
                raise SheetsApiError(400, "INVALID_ARGUMENT", f"A sheet with the name {name!r} already exists")
        for name in names:
            self.grids[name] = []

    async def read(self, partition: str, row_range: str) -> List[List[str]]:
        return await self._call(lambda: self._read(partition, row_range), f"values.get {partition}!{row_range}")

    async def write(self, partition: str, row_range: str, rows: Sequence[Sequence[str]]) -> None:
        self.calls.append(("write", partition, row_range))
        await self._call(lambda: self._write(partition, row_range, rows), f"values.update {partition}!{row_range}")

    async def append(self, partition: str, rows: Sequence[Sequence[str]]) -> None:
        self.calls.append(("append", partition, len(rows)))
        await self._call(lambda: self._append(partition, rows), f"values.append {partition}")

    async def delete_rows(self, partition: str, row_number: int) -> bool:
        self.calls.append(("delete", partition, row_number))
        return await self._call(lambda: self._delete(partition, row_number), f"batchUpdate delete {partition}!{row_number}")

    async def list_partitions(self) -> List[str]:
        return await self._call(lambda: list(self.grids), "spreadsheets.get")

    async def create_partitions(self, names: Sequence[str]) -> None:
        if not names:
            return
        self.calls.append(("create", tuple(names)))
        await self._call(lambda: self._create(names), "batchUpdate create sheets")

    async def create_partition(self, name: str) -> None:
        await self.create_partitions([name])
