"""
Identity and naming helpers for topology entities.

Ids follow a ``<prefix>-<n>`` scheme where ``n`` is one past the highest
suffix ever issued for that prefix, so ids never repeat within an editing
session.
"""

from typing import Iterable


SWITCH_PREFIX = "sw"
TERMINAL_PREFIX = "term"
CABLE_PREFIX = "cable"


def id_suffix(entity_id: str) -> int:
    """Return the numeric suffix of an id like ``sw-12`` (0 if none)."""
    _, _, tail = entity_id.rpartition("-")
    try:
        return int(tail)
    except ValueError:
        return 0


def next_index(ids: Iterable[str], prefix: str, floor: int = 0) -> int:
    """
    Get the next free numeric index for ``prefix``.

    Args:
        ids: Existing entity ids (any prefix; others are ignored)
        prefix: Id prefix without the dash, e.g. ``"sw"``
        floor: Highest index previously issued (high-water mark)

    Returns:
        1 + max(existing suffixes, floor)
    """
    head = f"{prefix}-"
    highest = max(
        (id_suffix(i) for i in ids if i.startswith(head)),
        default=0,
    )
    return max(highest, floor) + 1


def switch_id(index: int) -> str:
    return f"{SWITCH_PREFIX}-{index}"


def switch_label(index: int) -> str:
    return f"SW-{index}"


def terminal_id(index: int) -> str:
    return f"{TERMINAL_PREFIX}-{index}"


def terminal_label(index: int) -> str:
    return f"PC-{index}"


def cable_id(index: int) -> str:
    return f"{CABLE_PREFIX}-{index}"


def cable_label(source_label: str, source_port: int,
                target_label: str, target_port: int) -> str:
    """Default cable name, e.g. ``SW-1 P1 ↔ SW-2 P1``."""
    return f"{source_label} P{source_port} ↔ {target_label} P{target_port}"
