from __future__ import annotations

import logging
from typing import List, Sequence

from ...sheets.ranges import FIRST_DATA_ROW, role_cell
from ..models import Location, ReconcileResult, RoleTransition, WalletRecord
from ..partitions import partition_priority, resolve_partition

logger = logging.getLogger("wallet_role_bot.ledger")


def _one_per_user(transitions: Sequence[RoleTransition]) -> List[RoleTransition]:
    # Keep the row ``locate`` would find: highest priority sheet, topmost row.
    kept: dict[str, RoleTransition] = {}
    for transition in sorted(transitions, key=lambda t: (partition_priority(t.partition), t.row_number)):
        first = kept.get(transition.user_id)
        if first is None:
            kept[transition.user_id] = transition
            continue
        logger.warning(
            "Ignoring duplicate transition for user %s at %s!%s; using %s!%s",
            transition.user_id,
            transition.partition,
            transition.row_number,
            first.partition,
            first.row_number,
        )
    return list(kept.values())


class LedgerBatchMixin:
    async def reconcile(self, transitions: Sequence[RoleTransition]) -> ReconcileResult:
        """Apply role changes captured from one ``locate_all`` snapshot.

        Each transition runs on its own, one after another. Within a sheet they
        run from the bottom row up so a delete cannot shift a row that a later
        transition still points at. A user gets at most one transition, and a
        move only touches the row it was given, so no other delete happens.
        """
        result = ReconcileResult()
        if not transitions:
            return result
        await self.ensure_setup()

        valid = []
        for transition in transitions:
            if transition.row_number < FIRST_DATA_ROW:
                logger.warning(
                    "Skipping transition for user %s with invalid row %s!%s",
                    transition.user_id,
                    transition.partition,
                    transition.row_number,
                )
                continue
            valid.append(transition)
        ordered = sorted(_one_per_user(valid), key=lambda t: (partition_priority(t.partition), -t.row_number))

        expected = None
        for transition in ordered:
            if self.verify_row_identity:
                expected = transition.user_id
            target = resolve_partition(transition.new_role)

            if target is None:
                await self.delete_at(transition.partition, transition.row_number, expected_user_id=expected)
                result.updated += 1
                continue

            if target != transition.partition:
                row = WalletRecord(
                    username=transition.username,
                    user_id=transition.user_id,
                    wallet_address=transition.wallet,
                    role_label=transition.new_role,
                ).as_row()
                await self._move(
                    Location(transition.partition, transition.row_number),
                    target,
                    row,
                    expected_user_id=expected,
                )
                result.moved += 1
                continue

            if self.verify_row_identity:
                await self._check_row_owner(transition.partition, transition.row_number, transition.user_id)
            await self.table.write(
                transition.partition,
                role_cell(transition.row_number),
                [[transition.new_role or ""]],
            )
            result.updated += 1

        logger.info("Reconciled roles: %s updated, %s moved", result.updated, result.moved)
        return result
