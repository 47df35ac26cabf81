"""Vertical loads: required length from shaft friction in a single layer.

Single-layer approach: the pile is assumed to draw all of its vertical
capacity from the shaft friction of one soil layer,

    L = N_Ed / (tau * U)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

from .loads import DesignFactors, LoadCase
from .pile import PileGeometry
from .protocol import Protocol
from .soil import SoilLayer
from .units import fmt, is_finite, safe_div

logger = logging.getLogger(__name__)


class Governing(str, Enum):
    COMPRESSION = "compression"
    TENSION = "tension"
    NONE = "none"


@dataclass
class VerticalLengths:
    resistance_per_m: float      # R' = tau * U (kN/m)
    length_compression: float    # L_D (m)
    length_tension: float        # L_Z (m)
    governing: Governing
    length: float                # L_v = max(L_D, L_Z) (m)


def _finite_or_zero(v: float) -> float:
    return v if math.isfinite(v) else 0.0


def _has_shaft_friction(layer: SoilLayer) -> bool:
    return math.isfinite(layer.shaft_friction) and layer.shaft_friction > 0


def required_lengths(
    compression_ed: float,
    tension_ed: float,
    tau: float,
    perimeter: float,
) -> VerticalLengths:
    """Required lengths for design (already factored) vertical loads.

    Args:
        compression_ed: N_Ed,D (kN)
        tension_ed: N_Ed,Z (kN)
        tau: Shaft friction of the layer (kN/m^2)
        perimeter: Pile perimeter U (m)

    Ties between L_D and L_Z resolve to compression.
    """
    r_per_m = tau * perimeter
    l_d = safe_div(compression_ed, r_per_m) if compression_ed > 0 else 0.0
    l_z = safe_div(tension_ed, r_per_m) if tension_ed > 0 else 0.0

    if not compression_ed > 0 and not tension_ed > 0:
        governing, l_v = Governing.NONE, 0.0
    elif l_d >= l_z:
        governing, l_v = Governing.COMPRESSION, l_d
    else:
        governing, l_v = Governing.TENSION, l_z

    return VerticalLengths(
        resistance_per_m=r_per_m,
        length_compression=_finite_or_zero(l_d),
        length_tension=_finite_or_zero(l_z),
        governing=governing,
        length=_finite_or_zero(l_v),
    )


@dataclass
class VerticalRow:
    position: str
    layer: str
    tau: float                   # kN/m^2
    compression_ed: float        # N_Ed,D (kN)
    tension_ed: float            # N_Ed,Z (kN)
    lengths: VerticalLengths

    @property
    def length(self) -> float:
        return self.lengths.length


@dataclass
class VerticalTable:
    ok: bool
    message: str = ""
    rows: list[VerticalRow] = field(default_factory=list)
    excluded_layers: list[str] = field(default_factory=list)
    protocol: list[str] = field(default_factory=list)

    def for_position(self, position: str) -> list[VerticalRow]:
        return [r for r in self.rows if r.position == position]


def vertical_table(
    layers: list[SoilLayer],
    loads: list[LoadCase],
    factors: DesignFactors,
    pile: PileGeometry,
) -> VerticalTable:
    """Required vertical length L_v for each position in each single layer.

    Loads are raw; gamma_D and gamma_Z are applied here, once. Layers with
    tau <= 0 and layers that do not participate (thickness or unit weight
    not positive) are left out of the table.
    """
    prot = Protocol()
    prot.add("Vertical loads - single-layer approach (entirely in one soil layer)")
    prot.add("L = N_Ed / (tau * U)")
    prot.blank()

    if not (is_finite(factors.gamma_d, factors.gamma_z) and factors.gamma_d > 0
            and factors.gamma_z > 0 and pile.has_perimeter):
        message = "Factors gamma_D, gamma_Z and perimeter U must be given and positive."
        logger.warning(message)
        return VerticalTable(ok=False, message=message, protocol=prot.lines)

    usable = [l for l in layers if l.participates and _has_shaft_friction(l)]
    excluded = [l.name for l in layers if l not in usable]
    if not usable:
        message = "No soil layer with positive thickness and shaft friction tau > 0."
        logger.warning(message)
        return VerticalTable(ok=False, message=message, excluded_layers=excluded,
                             protocol=prot.lines)
    if not loads:
        message = "At least one load position is required."
        logger.warning(message)
        return VerticalTable(ok=False, message=message, excluded_layers=excluded,
                             protocol=prot.lines)

    prot.add("Input:")
    prot.add(f"- perimeter U = {fmt(pile.perimeter)} m")
    prot.add(f"- gamma_D = {fmt(factors.gamma_d)}   gamma_Z = {fmt(factors.gamma_z)}")
    prot.blank()
    prot.add("Layers (tau):")
    for layer in usable:
        prot.add(f"- {layer.name}: tau = {fmt(layer.shaft_friction, 1)} kN/m²")
    for layer in layers:
        if layer in usable:
            continue
        reason = "tau <= 0" if layer.participates else "thickness or unit weight not positive"
        prot.add(f"- {layer.name}: excluded ({reason})")
    prot.blank()

    prot.rule("Table (per load position x per soil layer)")
    prot.blank()

    rows: list[VerticalRow] = []
    for load in loads:
        design = factors.design_load(load)
        prot.add(f"Load position: {load.position}")
        prot.add(f"  Nd = {fmt(load.compression, 1)} kN -> N_Ed,D = {fmt(design.compression, 1)} kN")
        prot.add(f"  Nz = {fmt(load.tension, 1)} kN -> N_Ed,Z = {fmt(design.tension, 1)} kN")

        for layer in usable:
            lengths = required_lengths(
                design.compression, design.tension, layer.shaft_friction, pile.perimeter,
            )
            rows.append(VerticalRow(
                position=load.position,
                layer=layer.name,
                tau=layer.shaft_friction,
                compression_ed=design.compression,
                tension_ed=design.tension,
                lengths=lengths,
            ))
            prot.add(
                f"  - {layer.name}: tau={fmt(layer.shaft_friction, 1)} => "
                f"R'={fmt(lengths.resistance_per_m, 1)} kN/m | "
                f"L_D={fmt(lengths.length_compression)} m | L_Z={fmt(lengths.length_tension)} m | "
                f"governing={lengths.governing.value} | L_v={fmt(lengths.length)} m"
            )
        prot.blank()

    prot.rule("End of table (single-layer approach)")

    return VerticalTable(ok=True, rows=rows, excluded_layers=excluded, protocol=prot.lines)
