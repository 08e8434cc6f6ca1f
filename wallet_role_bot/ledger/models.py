from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

INSERTED = "inserted"
UPDATED = "updated"
SKIPPED = "skipped"


@dataclass(slots=True)
class WalletRecord:
    username: str
    user_id: str
    wallet_address: str
    role_label: str = ""

    def as_row(self) -> List[str]:
        return [self.username, self.user_id, self.wallet_address, self.role_label or ""]

    @classmethod
    def from_row(cls, row: Sequence[str]) -> "WalletRecord":
        cells = [str(cell) for cell in row[:4]]
        cells.extend([""] * (4 - len(cells)))
        return cls(username=cells[0], user_id=cells[1], wallet_address=cells[2], role_label=cells[3])


@dataclass(slots=True, frozen=True)
class Location:
    """Pointer to a sheet row.

    ``row_number`` is the 1-based sheet row (the header is row 1). It is only
    valid until any lower-numbered row of the same partition is deleted, so
    never hold one across a mutation without locating again.
    """

    partition: str
    row_number: int


@dataclass(slots=True)
class LocatedRecord:
    location: Location
    record: WalletRecord

    @property
    def partition(self) -> str:
        return self.location.partition

    @property
    def row_number(self) -> int:
        return self.location.row_number


@dataclass(slots=True)
class UpsertResult:
    action: str
    reason: str = ""


@dataclass(slots=True)
class RoleTransition:
    partition: str
    row_number: int
    user_id: str
    username: str
    wallet: str
    new_role: str

    @classmethod
    def from_located(cls, located: LocatedRecord, new_role: str) -> "RoleTransition":
        return cls(
            partition=located.partition,
            row_number=located.row_number,
            user_id=located.record.user_id,
            username=located.record.username,
            wallet=located.record.wallet_address,
            new_role=new_role or "",
        )


@dataclass(slots=True)
class ReconcileResult:
    updated: int = 0
    moved: int = 0


@dataclass(slots=True)
class DeleteManyResult:
    deleted: int = 0
