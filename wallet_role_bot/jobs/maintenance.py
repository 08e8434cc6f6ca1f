from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Sequence

from ..ledger.models import LocatedRecord, Location, RoleTransition
from ..ledger.store import WalletLedger
from .pool import run_bounded

logger = logging.getLogger("wallet_role_bot.jobs")

RoleLookup = Callable[[str], Awaitable[str]]


@dataclass(slots=True)
class RefreshResult:
    scanned: int = 0
    changed: int = 0
    updated: int = 0
    moved: int = 0

    def summary(self) -> str:
        return f"Roles refreshed: {self.updated} updated, {self.moved} moved between sheets."


@dataclass(slots=True)
class PruneResult:
    scanned: int = 0
    deleted: int = 0

    def summary(self) -> str:
        return f"Pruned {self.deleted} entrie(s) with no priority roles."


def _user_ids(items: Sequence[LocatedRecord]) -> List[str]:
    seen: Dict[str, None] = {}
    for item in items:
        if item.record.user_id:
            seen.setdefault(item.record.user_id, None)
    return list(seen)


async def _lookup_labels(
    user_ids: Sequence[str],
    lookup_label: RoleLookup,
    concurrency: int,
) -> Dict[str, str]:
    """Current label per user. Users whose lookup failed are left out."""
    labels = await run_bounded(user_ids, lookup_label, concurrency)
    found: Dict[str, str] = {}
    for user_id, label in zip(user_ids, labels):
        if isinstance(label, BaseException):
            logger.warning("Role lookup failed for user %s, leaving row as is: %s", user_id, label)
            continue
        found[user_id] = str(label or "")
    return found


async def refresh_roles(
    ledger: WalletLedger,
    lookup_label: RoleLookup,
    concurrency: int = 5,
    *,
    snapshot: Sequence[LocatedRecord] | None = None,
) -> RefreshResult:
    """Re-derive every stored user's role and move rows to match.

    ``snapshot`` only picks which users to look up. Row positions are read
    again once all lookups are done, right before any write.
    """
    user_ids = _user_ids(await ledger.locate_all() if snapshot is None else snapshot)
    result = RefreshResult(scanned=len(user_ids))
    labels = await _lookup_labels(user_ids, lookup_label, concurrency)

    transitions: list[RoleTransition] = []
    handled: set[str] = set()
    for item in await ledger.locate_all():
        user_id = item.record.user_id
        # Only the first row per user counts, the one ``locate`` returns.
        if user_id not in labels or user_id in handled:
            continue
        handled.add(user_id)
        new_role = labels[user_id]
        if (item.record.role_label or "") != new_role:
            transitions.append(RoleTransition.from_located(item, new_role))

    result.changed = len(transitions)
    if transitions:
        # Writes stay sequential; only the lookups above ran in parallel.
        reconciled = await ledger.reconcile(transitions)
        result.updated = reconciled.updated
        result.moved = reconciled.moved
    return result


async def prune_without_priority(
    ledger: WalletLedger,
    lookup_label: RoleLookup,
    concurrency: int = 5,
    *,
    snapshot: Sequence[LocatedRecord] | None = None,
) -> PruneResult:
    """Delete every row of users who hold no priority role any more."""
    user_ids = _user_ids(await ledger.locate_all() if snapshot is None else snapshot)
    result = PruneResult(scanned=len(user_ids))
    labels = await _lookup_labels(user_ids, lookup_label, concurrency)

    doomed: list[Location] = [
        item.location
        for item in await ledger.locate_all()
        if item.record.user_id in labels and not labels[item.record.user_id]
    ]
    if doomed:
        result.deleted = (await ledger.delete_many(doomed)).deleted
    return result
