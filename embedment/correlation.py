"""Apportionment of the governing depth across the real soil layers.

The single-layer depths L_h and L_v assume the pile sits entirely in one
layer. The correlation walks down the real profile and lets each layer carry
as much of the demand as its thickness allows:

    need = governing * remaining
    used = min(thickness, need)
    remaining -= used / governing

until the whole demand (100 %) is covered or the layers run out.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

from .horizontal import HorizontalRow, HorizontalTable
from .loads import LoadCase
from .protocol import Protocol
from .soil import SoilLayer, SoilProfile
from .units import fmt, max_finite
from .vertical import VerticalRow, VerticalTable

logger = logging.getLogger(__name__)

REMAINING_TOL = 1e-12


class Criterion(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    NONE = "none"


@dataclass(frozen=True)
class GoverningDepth:
    """max(L_h, L_v) of one layer, ignoring values that are not finite."""
    length: float
    criterion: Criterion
    length_horizontal: float = math.nan
    length_vertical: float = math.nan


def governing_depth(length_horizontal: float, length_vertical: float) -> GoverningDepth:
    length = max_finite(length_horizontal, length_vertical)
    if math.isnan(length):
        criterion = Criterion.NONE
    elif length_horizontal == length and not length_vertical >= length_horizontal:
        criterion = Criterion.HORIZONTAL
    else:
        # Ties go to the vertical criterion
        criterion = Criterion.VERTICAL
    return GoverningDepth(length, criterion, length_horizontal, length_vertical)


def governing_depths(
    horizontal_rows: list[HorizontalRow],
    vertical_rows: list[VerticalRow],
) -> dict[str, GoverningDepth]:
    """Governing single-layer depth per layer name for one position."""
    lh = {r.layer: r.length for r in horizontal_rows}
    lv = {r.layer: r.length for r in vertical_rows}
    out = {}
    for name in list(lh) + [n for n in lv if n not in lh]:
        out[name] = governing_depth(lh.get(name, math.nan), lv.get(name, math.nan))
    return out


@dataclass
class CorrelationRow:
    index: int                  # 1-based position in the profile
    layer: str
    thickness: float            # m
    governing: float            # Single-layer depth max(L_h, L_v) (m)
    criterion: Criterion
    share_pct: float            # Share of the demand carried here (%)
    remaining_pct: float        # Demand left after this layer (%)
    depth_used: float           # Depth driven through this layer (m)
    cumulative_depth: float     # Driven depth down to the end of this layer (m)
    top_depth: float = 0.0      # Depth of the layer top below ground (m)


@dataclass
class CorrelationBlock:
    position: str
    rows: list[CorrelationRow]
    total_depth: float          # m
    remaining: float            # Fraction of demand not covered (0..1)
    support: str = ""
    zone: str = ""
    profile_depth: float = math.nan     # Total thickness of the profile (m)
    protocol: list[str] = field(default_factory=list)

    @property
    def satisfied(self) -> bool:
        return self.remaining <= REMAINING_TOL


def _finite(v: float | None) -> float:
    return v if v is not None and math.isfinite(v) else math.nan


def apportion(
    position: str,
    layers: list[SoilLayer],
    governing: dict[str, float],
    criteria: dict[str, Criterion] | None = None,
    support: str = "",
    zone: str = "",
) -> CorrelationBlock:
    """Distribute one position's depth demand over the ordered layers.

    Args:
        position: Load position name
        layers: Real layers, top to bottom
        governing: Layer name -> governing single-layer depth (m)
        criteria: Layer name -> criterion that produced that depth

    Returns:
        CorrelationBlock. If the layers are exhausted before 100 % of the
        demand is covered, ``satisfied`` is False and ``total_depth`` is the
        depth actually consumed.
    """
    criteria = criteria or {}
    profile = SoilProfile(layers=list(layers))
    prot = Protocol()
    prot.add(f"Correlation: {position}")

    remaining = 1.0
    total = 0.0
    rows: list[CorrelationRow] = []

    for i, (layer, thickness, top) in enumerate(
        zip(profile.layers, profile.thicknesses, profile.top_depths), start=1
    ):
        thickness = float(thickness)
        top = float(top)
        gov = _finite(governing.get(layer.name))
        criterion = criteria.get(layer.name, Criterion.NONE)

        if not (thickness > 0) or not (gov > 0) or remaining <= 0:
            rows.append(CorrelationRow(
                index=i, layer=layer.name, thickness=thickness, governing=gov,
                criterion=criterion, share_pct=math.nan,
                remaining_pct=remaining * 100, depth_used=0.0,
                cumulative_depth=total, top_depth=top,
            ))
            prot.add(f"  {i} - {layer.name}: skipped (thickness={fmt(thickness)} m, "
                     f"governing={fmt(gov)} m)")
            continue

        need = gov * remaining
        used = min(thickness, need)
        share = used / gov
        remaining = max(0.0, remaining - share)
        total += used

        rows.append(CorrelationRow(
            index=i, layer=layer.name, thickness=thickness, governing=gov,
            criterion=criterion, share_pct=share * 100,
            remaining_pct=remaining * 100, depth_used=used,
            cumulative_depth=total, top_depth=top,
        ))
        prot.add(
            f"  {i} - {layer.name}: d={fmt(thickness)} m, L={fmt(gov)} m, "
            f"share={fmt(share * 100, 1)} %, rest={fmt(remaining * 100, 1)} %, "
            f"depth={fmt(used)} m, cumulative={fmt(total)} m"
        )

        if remaining <= REMAINING_TOL:
            break

    block = CorrelationBlock(
        position=position, rows=rows, total_depth=total, remaining=remaining,
        support=support, zone=zone, profile_depth=profile.total_thickness,
    )
    prot.add(f"  Required driven depth: {fmt(total)} m")
    if not block.satisfied:
        prot.add(f"  WARNING: layers exhausted at {fmt(block.profile_depth)} m, "
                 f"{fmt(remaining * 100, 1)} % of the demand not covered")
        logger.warning(
            "Position %s: profile of %.2f m too shallow, %.1f %% of demand not covered",
            position, block.profile_depth, remaining * 100,
        )
    block.protocol = prot.lines
    return block


def correlate(
    layers: list[SoilLayer],
    horizontal: HorizontalTable,
    vertical: VerticalTable,
    loads: list[LoadCase],
) -> list[CorrelationBlock]:
    """One correlation block per load position, in load order."""
    blocks = []
    for load in loads:
        gov = governing_depths(
            horizontal.for_position(load.position),
            vertical.for_position(load.position),
        )
        blocks.append(apportion(
            load.position,
            layers,
            {name: g.length for name, g in gov.items()},
            {name: g.criterion for name, g in gov.items()},
            support=load.support,
            zone=load.zone,
        ))
    return blocks
