from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence


@dataclass(slots=True, frozen=True)
class PriorityRole:
    role_id: int
    label: str


DEFAULT_PRIORITY_ROLES: tuple[PriorityRole, ...] = (
    PriorityRole(1184443552571338792, "Monadian"),
    PriorityRole(1316432197162631238, "Monarch"),
    PriorityRole(1184772610102394950, "Monalista"),
)


def parse_priority_roles(raw: str) -> list[PriorityRole]:
    """Parse ``id:Label,id:Label`` (highest priority first)."""
    roles: list[PriorityRole] = []
    for chunk in raw.split(","):
        role_id, sep, label = chunk.strip().partition(":")
        if not sep:
            continue
        try:
            parsed_id = int(role_id.strip())
        except ValueError:
            continue
        label = label.strip()
        if label:
            roles.append(PriorityRole(parsed_id, label))
    return roles


def highest_priority_label(role_ids: Iterable[int], priority_roles: Sequence[PriorityRole]) -> str:
    held = {int(role_id) for role_id in role_ids}
    for role in priority_roles:
        if role.role_id in held:
            return role.label
    return ""
