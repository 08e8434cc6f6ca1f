from __future__ import annotations

MONADIANS = "Monadians"
MONARCH = "Monarch"
MONALISTA = "Monalista"

# Highest priority role first; the locator scans in this order.
PARTITIONS: tuple[str, ...] = (MONADIANS, MONARCH, MONALISTA)

HEADER_ROW: tuple[str, ...] = ("Discord Username", "Discord ID", "EVM Wallet", "Role")

_PARTITION_BY_ROLE = {
    "monadian": MONADIANS,
    "monarch": MONARCH,
    "monalista": MONALISTA,
}


def normalize_role_label(role_label: str | None) -> str:
    return (role_label or "").strip().casefold()


def resolve_partition(role_label: str | None) -> str | None:
    return _PARTITION_BY_ROLE.get(normalize_role_label(role_label))


def partition_priority(partition: str) -> int:
    try:
        return PARTITIONS.index(partition)
    except ValueError:
        return len(PARTITIONS)


def is_partition(name: str) -> bool:
    return name in PARTITIONS
