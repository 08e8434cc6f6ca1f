from __future__ import annotations

import asyncio
import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from wallet_role_bot.ledger.models import INSERTED, SKIPPED, UPDATED, WalletRecord  # noqa: E402
from wallet_role_bot.ledger.partitions import HEADER_ROW, MONADIANS, MONALISTA, MONARCH, PARTITIONS  # noqa: E402
from wallet_role_bot.ledger.store import WalletLedger  # noqa: E402
from wallet_role_bot.sheets.memory_table import InMemorySheetsTable  # noqa: E402


HEADER = list(HEADER_ROW)


def _ledger(partitions: dict[str, list[list[str]]] | None = None) -> tuple[WalletLedger, InMemorySheetsTable]:
    table = InMemorySheetsTable(partitions)
    return WalletLedger(table), table


def _rows_for(table: InMemorySheetsTable, user_id: str) -> list[tuple[str, list[str]]]:
    return [(name, row) for name in PARTITIONS for row in table.rows(name) if len(row) > 1 and row[1] == user_id]


def test_ensure_setup_creates_missing_sheets_and_repairs_headers() -> None:
    ledger, table = _ledger({MONARCH: [["Wrong", "Header"]]})

    asyncio.run(ledger.ensure_setup())

    assert set(table.grids) == set(PARTITIONS)
    for name in PARTITIONS:
        assert table.grids[name][0] == HEADER
    assert ("create", (MONADIANS, MONALISTA)) in table.calls


def test_ensure_setup_leaves_correct_headers_alone() -> None:
    ledger, table = _ledger({name: [list(HEADER)] for name in PARTITIONS})

    asyncio.run(ledger.ensure_setup())

    assert table.calls == []


def test_insert_move_then_skip_scenario() -> None:
    ledger, table = _ledger()
    record = WalletRecord(username="alice", user_id="user1", wallet_address="0xabc")

    first = asyncio.run(ledger.upsert(record, "Monadian"))
    assert first.action == INSERTED
    assert table.rows(MONADIANS) == [["alice", "user1", "0xabc", "Monadian"]]

    second = asyncio.run(ledger.upsert(record, "Monarch"))
    assert second.action == INSERTED
    assert table.rows(MONADIANS) == []
    assert table.rows(MONARCH) == [["alice", "user1", "0xabc", "Monarch"]]

    third = asyncio.run(ledger.upsert(record, ""))
    assert third.action == SKIPPED
    assert third.reason == "no_priority_role"
    assert table.rows(MONARCH) == [["alice", "user1", "0xabc", "Monarch"]]


def test_upsert_twice_keeps_one_row_with_latest_values() -> None:
    ledger, table = _ledger()

    asyncio.run(ledger.upsert(WalletRecord("alice", "user1", "0xabc"), "Monalista"))
    result = asyncio.run(ledger.upsert(WalletRecord("alice2", "user1", "0xdef"), "monalista"))

    assert result.action == UPDATED
    assert _rows_for(table, "user1") == [(MONALISTA, ["alice2", "user1", "0xdef", "monalista"])]


def test_update_in_place_does_not_disturb_neighbours() -> None:
    ledger, table = _ledger(
        {
            MONARCH: [
                list(HEADER),
                ["bob", "user2", "0x2", "Monarch"],
                ["alice", "user1", "0x1", "Monarch"],
                ["carol", "user3", "0x3", "Monarch"],
            ]
        }
    )

    result = asyncio.run(ledger.upsert(WalletRecord("alice", "user1", "0x9"), "Monarch"))

    assert result.action == UPDATED
    assert table.rows(MONARCH) == [
        ["bob", "user2", "0x2", "Monarch"],
        ["alice", "user1", "0x9", "Monarch"],
        ["carol", "user3", "0x3", "Monarch"],
    ]
    assert ("write", MONARCH, "A3:D3") in table.calls


def test_move_leaves_exactly_one_row_in_target_partition() -> None:
    ledger, table = _ledger(
        {
            MONALISTA: [list(HEADER), ["dave", "user4", "0x4", "Monalista"], ["erin", "user5", "0x5", "Monalista"]],
        }
    )

    asyncio.run(ledger.upsert(WalletRecord("dave", "user4", "0x4"), "Monadian"))

    assert _rows_for(table, "user4") == [(MONADIANS, ["dave", "user4", "0x4", "Monadian"])]
    assert table.rows(MONALISTA) == [["erin", "user5", "0x5", "Monalista"]]


def test_update_role_reuses_stored_username_and_wallet() -> None:
    ledger, table = _ledger({MONARCH: [list(HEADER), ["alice", "user1", "0xabc", "Monarch"]]})

    assert asyncio.run(ledger.update_role("user1", "Monadian")) is True
    assert asyncio.run(ledger.update_role("ghost", "Monadian")) is False

    assert table.rows(MONARCH) == []
    assert table.rows(MONADIANS) == [["alice", "user1", "0xabc", "Monadian"]]


def test_locate_prefers_highest_priority_duplicate() -> None:
    ledger, _table = _ledger(
        {
            MONADIANS: [list(HEADER), ["alice", "user1", "0x1", "Monadian"]],
            MONALISTA: [list(HEADER), ["alice", "user1", "0x2", "Monalista"]],
        }
    )

    located = asyncio.run(ledger.locate("user1"))

    assert located is not None
    assert located.partition == MONADIANS
    assert located.row_number == 2
    assert located.record.wallet_address == "0x1"


def test_locate_all_keeps_sheet_row_numbers_across_blank_rows() -> None:
    ledger, _table = _ledger(
        {
            MONARCH: [
                list(HEADER),
                ["bob", "user2", "0x2", "Monarch"],
                ["", "", "", ""],
                ["carol", "user3", "0x3"],
            ]
        }
    )

    items = asyncio.run(ledger.locate_all())

    assert [(i.partition, i.row_number, i.record.user_id) for i in items] == [
        (MONARCH, 2, "user2"),
        (MONARCH, 4, "user3"),
    ]
    assert items[1].record.role_label == ""


def test_get_wallet_and_list_wallets_read_across_partitions() -> None:
    ledger, _table = _ledger()
    asyncio.run(ledger.upsert(WalletRecord("alice", "user1", "0x1"), "Monalista"))
    asyncio.run(ledger.upsert(WalletRecord("bob", "user2", "0x2"), "Monadian"))

    record = asyncio.run(ledger.get_wallet("user1"))
    wallets = asyncio.run(ledger.list_wallets())

    assert record == WalletRecord("alice", "user1", "0x1", "Monalista")
    assert asyncio.run(ledger.get_wallet("nobody")) is None
    assert [w.user_id for w in wallets] == ["user2", "user1"]


def test_upsert_survives_rate_limits() -> None:
    delays: list[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    table = InMemorySheetsTable(sleep=_sleep)
    ledger = WalletLedger(table)
    table.fail_next_calls(3)

    result = asyncio.run(ledger.upsert(WalletRecord("alice", "user1", "0x1"), "Monarch"))

    assert result.action == INSERTED
    assert len(delays) == 3
    assert table.rows(MONARCH) == [["alice", "user1", "0x1", "Monarch"]]
