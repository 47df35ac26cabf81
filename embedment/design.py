"""Full embedment design run: horizontal, vertical, correlation, summary.

The horizontal and vertical tables are computed independently for the same
load positions. The correlation runs on whatever rows are available, so a
fatal input problem in one method (for example a missing pile width) still
leaves the other method's depths in the result.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from .config import DEFAULTS, SolverSettings
from .correlation import CorrelationBlock, correlate
from .horizontal import HorizontalTable, horizontal_table
from .loads import DesignFactors, LoadCase, build_load_cases
from .pile import PileGeometry
from .protocol import Protocol
from .soil import SoilLayer, build_soil_layers
from .summary import PositionSummary, summarize
from .units import parse_decimal
from .vertical import VerticalTable, vertical_table

logger = logging.getLogger(__name__)


@dataclass
class EmbeddingDesign:
    """Complete result of one calculation request."""
    ok: bool
    horizontal: HorizontalTable
    vertical: VerticalTable
    correlation: list[CorrelationBlock] = field(default_factory=list)
    summary: list[PositionSummary] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)
    protocol: list[str] = field(default_factory=list)


def calculate(
    layers: list[SoilLayer],
    loads: list[LoadCase],
    factors: DesignFactors | None = None,
    pile: PileGeometry | None = None,
    settings: SolverSettings | None = None,
    extra_safety: float = 0.0,
) -> EmbeddingDesign:
    """Run every step of the embedment design for raw loads.

    Args:
        layers: Soil layers, top to bottom
        loads: Raw load cases, one per support position
        factors: Design factors (defaults if None)
        pile: Pile geometry
        settings: Solver settings for the horizontal method
        extra_safety: Flat allowance for the recommended depth (m)
    """
    factors = factors or DesignFactors()
    pile = pile or PileGeometry(width=math.nan, perimeter=math.nan)
    settings = settings or SolverSettings()

    h = horizontal_table(layers, loads, factors, pile, settings)
    v = vertical_table(layers, loads, factors, pile)

    messages = [t.message for t in (h, v) if not t.ok]
    prot = Protocol()
    prot.extend(h.protocol).blank().extend(v.protocol).blank()

    if not (h.ok or v.ok):
        logger.warning("Embedment design aborted: %s", "; ".join(messages))
        return EmbeddingDesign(ok=False, horizontal=h, vertical=v,
                               messages=messages, protocol=prot.lines)

    blocks = correlate(layers, h, v, loads)
    prot.rule("Correlation of the governing depth across the soil layers")
    for b in blocks:
        prot.extend(b.protocol).blank()

    summary = summarize(blocks, loads, extra_safety)
    for s in summary:
        flag = "" if s.satisfied else " (NOT SATISFIED)"
        prot.add(
            f"{s.position}: required {s.required_depth:.2f} m, governing {s.governing.value}, "
            f"recommended {s.recommended_depth:.2f} m{flag}"
        )

    return EmbeddingDesign(
        ok=True,
        horizontal=h,
        vertical=v,
        correlation=blocks,
        summary=summary,
        messages=messages,
        protocol=prot.lines,
    )


def calculate_from_body(body: dict) -> EmbeddingDesign:
    """Parse a request body of decimal strings and run ``calculate``."""
    extra = parse_decimal(body.get("extra_safety_m", DEFAULTS["extra_safety_m"]))
    return calculate(
        layers=build_soil_layers(body.get("layers")),
        loads=build_load_cases(body.get("loads")),
        factors=DesignFactors.from_dict(body.get("factors")),
        pile=PileGeometry.from_dict(body.get("pile")),
        settings=SolverSettings.from_dict(body.get("settings")),
        extra_safety=extra if math.isfinite(extra) else 0.0,
    )
