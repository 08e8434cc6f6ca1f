from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from wallet_role_bot.ledger.models import Location, RoleTransition  # noqa: E402
from wallet_role_bot.ledger.partitions import HEADER_ROW, MONADIANS, MONALISTA, MONARCH, PARTITIONS  # noqa: E402
from wallet_role_bot.ledger.store import WalletLedger  # noqa: E402
from wallet_role_bot.sheets.errors import StaleLocationError  # noqa: E402
from wallet_role_bot.sheets.memory_table import InMemorySheetsTable  # noqa: E402


HEADER = list(HEADER_ROW)


def _seeded(extra: dict[str, list[list[str]]]) -> InMemorySheetsTable:
    grids = {name: [list(HEADER)] for name in PARTITIONS}
    for name, rows in extra.items():
        grids[name].extend(rows)
    return InMemorySheetsTable(grids)


def _deletes(table: InMemorySheetsTable) -> list[tuple]:
    return [call for call in table.calls if call[0] == "delete"]


def _transition(partition: str, row_number: int, user_id: str, new_role: str) -> RoleTransition:
    return RoleTransition(
        partition=partition,
        row_number=row_number,
        user_id=user_id,
        username=f"name-{user_id}",
        wallet=f"0x{user_id}",
        new_role=new_role,
    )


def test_delete_many_runs_bottom_up_within_a_partition() -> None:
    table = _seeded({MONADIANS: [["u1", "u1"], ["u2", "u2"], ["u3", "u3"], ["u4", "u4"], ["u5", "u5"]]})
    ledger = WalletLedger(table)

    result = asyncio.run(
        ledger.delete_many([Location(MONADIANS, 2), Location(MONADIANS, 5), Location(MONADIANS, 3)])
    )

    assert result.deleted == 3
    assert _deletes(table) == [("delete", MONADIANS, 5), ("delete", MONADIANS, 3), ("delete", MONADIANS, 2)]
    assert [row[1] for row in table.rows(MONADIANS)] == ["u3", "u5"]


def test_delete_many_skips_invalid_and_duplicate_targets() -> None:
    table = _seeded({MONARCH: [["a", "a"], ["b", "b"]]})
    ledger = WalletLedger(table)

    result = asyncio.run(
        ledger.delete_many(
            [
                Location(MONARCH, 3),
                Location(MONARCH, 3),
                Location(MONARCH, 1),
                Location("Elsewhere", 2),
            ]
        )
    )

    assert result.deleted == 1
    assert _deletes(table) == [("delete", MONARCH, 3)]
    assert table.rows(MONARCH) == [["a", "a"]]


def test_delete_many_with_nothing_to_do() -> None:
    ledger = WalletLedger(_seeded({}))
    assert asyncio.run(ledger.delete_many([])).deleted == 0


def test_reconcile_removes_moves_and_updates_without_index_corruption() -> None:
    table = _seeded(
        {
            MONADIANS: [
                ["name-u1", "u1", "0xu1", "Monadian"],
                ["name-u2", "u2", "0xu2", "Monadian"],
                ["name-u3", "u3", "0xu3", "monadian"],
            ]
        }
    )
    ledger = WalletLedger(table)

    # Deliberately top-down: applying these in this order would shift rows 3 and 4.
    result = asyncio.run(
        ledger.reconcile(
            [
                _transition(MONADIANS, 2, "u1", ""),
                _transition(MONADIANS, 3, "u2", "Monarch"),
                _transition(MONADIANS, 4, "u3", "Monadian"),
            ]
        )
    )

    assert result.updated == 2
    assert result.moved == 1
    assert table.rows(MONADIANS) == [["name-u3", "u3", "0xu3", "Monadian"]]
    assert table.rows(MONARCH) == [["name-u2", "u2", "0xu2", "Monarch"]]
    assert ("write", MONADIANS, "D4:D4") in table.calls


def test_reconcile_moves_into_lower_priority_partition() -> None:
    table = _seeded(
        {
            MONARCH: [["name-u7", "u7", "0xu7", "Monarch"], ["name-u8", "u8", "0xu8", "Monarch"]],
        }
    )
    ledger = WalletLedger(table)

    result = asyncio.run(ledger.reconcile([_transition(MONARCH, 2, "u7", "Monalista")]))

    assert result.moved == 1
    assert table.rows(MONARCH) == [["name-u8", "u8", "0xu8", "Monarch"]]
    assert table.rows(MONALISTA) == [["name-u7", "u7", "0xu7", "Monalista"]]


def test_reconcile_skips_header_row_targets() -> None:
    table = _seeded({MONARCH: [["name-u7", "u7", "0xu7", "Monarch"]]})
    ledger = WalletLedger(table)

    result = asyncio.run(ledger.reconcile([_transition(MONARCH, 1, "u7", "")]))

    assert result.updated == 0
    assert table.grids[MONARCH][0] == HEADER
    assert _deletes(table) == []


def test_identity_check_refuses_to_delete_someone_else() -> None:
    table = _seeded({MONARCH: [["name-u1", "u1", "0xu1", "Monarch"]]})
    ledger = WalletLedger(table, verify_row_identity=True)

    with pytest.raises(StaleLocationError) as excinfo:
        asyncio.run(ledger.reconcile([_transition(MONARCH, 2, "u9", "")]))

    assert excinfo.value.found_user_id == "u1"
    assert table.rows(MONARCH) == [["name-u1", "u1", "0xu1", "Monarch"]]


def test_identity_check_passes_for_fresh_locations() -> None:
    table = _seeded({MONARCH: [["name-u1", "u1", "0xu1", "Monarch"], ["name-u2", "u2", "0xu2", "Monarch"]]})
    ledger = WalletLedger(table, verify_row_identity=True)

    snapshot = asyncio.run(ledger.locate_all())
    transitions = [RoleTransition.from_located(item, "") for item in snapshot]
    result = asyncio.run(ledger.reconcile(transitions))

    assert result.updated == 2
    assert table.rows(MONARCH) == []


def test_delete_at_with_expected_user_checks_the_row() -> None:
    table = _seeded({MONALISTA: [["name-u1", "u1", "0xu1", "Monalista"]]})
    ledger = WalletLedger(table)

    with pytest.raises(StaleLocationError):
        asyncio.run(ledger.delete_at(MONALISTA, 2, expected_user_id="u2"))
    assert asyncio.run(ledger.delete_at(MONALISTA, 2, expected_user_id="u1")) is True
    assert table.rows(MONALISTA) == []


def test_reconcile_move_leaves_duplicate_rows_and_neighbours_in_place() -> None:
    table = _seeded(
        {
            MONADIANS: [["name-u1", "u1", "0xu1", "Monadian"]],
            MONALISTA: [["name-u1", "u1", "0xu1", "Monalista"], ["name-v9", "v9", "0xv9", "Monalista"]],
        }
    )
    ledger = WalletLedger(table)

    result = asyncio.run(
        ledger.reconcile(
            [
                _transition(MONADIANS, 2, "u1", "Monarch"),
                _transition(MONALISTA, 3, "v9", "Monarch"),
            ]
        )
    )

    assert result.moved == 2
    assert _deletes(table) == [("delete", MONADIANS, 2), ("delete", MONALISTA, 3)]
    assert table.rows(MONALISTA) == [["name-u1", "u1", "0xu1", "Monalista"]]
    assert [row[1] for row in table.rows(MONARCH)] == ["u1", "v9"]


def test_reconcile_applies_one_transition_per_user() -> None:
    table = _seeded(
        {
            MONARCH: [["name-u4", "u4", "0xu4", "Monarch"]],
            MONALISTA: [["name-u4", "u4", "0xu4", "Monalista"], ["name-u5", "u5", "0xu5", "Monalista"]],
        }
    )
    ledger = WalletLedger(table)

    result = asyncio.run(
        ledger.reconcile(
            [
                _transition(MONALISTA, 2, "u4", ""),
                _transition(MONARCH, 2, "u4", ""),
            ]
        )
    )

    assert result.updated == 1
    assert _deletes(table) == [("delete", MONARCH, 2)]
    assert [row[1] for row in table.rows(MONALISTA)] == ["u4", "u5"]
