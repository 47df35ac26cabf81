"""Per-position summary of the correlated driven depths."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .correlation import CorrelationBlock, Criterion
from .loads import LoadCase

SUPPORT_ORDER = {"short": 0, "long": 1}
ZONE_ORDER = {"green": 0, "yellow": 1, "red": 2}


@dataclass
class PositionSummary:
    position: str
    support: str
    zone: str                   # Worst zone of the position
    required_depth: float       # Correlated total depth (m)
    governing: Criterion
    recommended_depth: float    # required_depth + allowance (m)
    satisfied: bool


def worst_zone(zones: list[str]) -> str:
    """red > yellow > green; unknown labels rank below green."""
    known = [z for z in zones if z in ZONE_ORDER]
    if known:
        return max(known, key=ZONE_ORDER.get)
    return next((z for z in zones if z), "")


def governing_criterion(block: CorrelationBlock) -> Criterion:
    """Criterion of the layer that carries the largest depth."""
    used = np.array([r.depth_used for r in block.rows], dtype=float)
    if used.size == 0 or not (used > 0).any():
        return Criterion.NONE
    return block.rows[int(np.argmax(used))].criterion


def summarize(
    blocks: list[CorrelationBlock],
    loads: list[LoadCase] | None = None,
    extra_safety: float = 0.0,
) -> list[PositionSummary]:
    """One summary row per position, sorted by support, zone, then name.

    Args:
        blocks: Correlation blocks
        loads: Load cases, used to pick the worst zone per position
        extra_safety: Flat allowance added to the required depth (m)
    """
    zones_by_position: dict[str, list[str]] = {}
    for lc in loads or []:
        zones_by_position.setdefault(lc.position, []).append(lc.zone)

    out = []
    for b in blocks:
        zones = zones_by_position.get(b.position, []) + [b.zone]
        out.append(PositionSummary(
            position=b.position,
            support=b.support,
            zone=worst_zone(zones),
            required_depth=b.total_depth,
            governing=governing_criterion(b),
            recommended_depth=b.total_depth + (extra_safety or 0.0),
            satisfied=b.satisfied,
        ))

    out.sort(key=lambda s: (
        SUPPORT_ORDER.get(s.support, 9),
        ZONE_ORDER.get(s.zone, 9),
        s.position,
    ))
    return out
