from .models import (
    DeleteManyResult,
    LocatedRecord,
    Location,
    ReconcileResult,
    RoleTransition,
    UpsertResult,
    WalletRecord,
)
from .partitions import HEADER_ROW, PARTITIONS, resolve_partition
from .store import WalletLedger

__all__ = [
    "DeleteManyResult",
    "HEADER_ROW",
    "LocatedRecord",
    "Location",
    "PARTITIONS",
    "ReconcileResult",
    "RoleTransition",
    "UpsertResult",
    "WalletLedger",
    "WalletRecord",
    "resolve_partition",
]
