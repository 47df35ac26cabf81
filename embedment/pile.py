"""Pile cross-section geometry."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .units import parse_decimal


@dataclass(frozen=True)
class PileGeometry:
    """Pile properties shared by every position and layer of one run."""
    width: float        # b (m), used for earth resistance
    perimeter: float    # U (m), used for shaft friction

    @property
    def has_width(self) -> bool:
        return math.isfinite(self.width) and self.width > 0

    @property
    def has_perimeter(self) -> bool:
        return math.isfinite(self.perimeter) and self.perimeter > 0

    @classmethod
    def from_dict(cls, d: dict | None) -> "PileGeometry":
        """Build from a request ``pile`` record.

        When U is not given but the section depth ``h_m`` is, the perimeter
        of the rectangular envelope b x h is used.
        """
        d = d or {}
        width = parse_decimal(d.get("b_m"))
        perimeter = parse_decimal(d.get("U_m"))
        depth = parse_decimal(d.get("h_m"))
        if not math.isfinite(perimeter) and depth > 0 and width > 0:
            return rectangular_section(depth, width)
        return cls(width=width, perimeter=perimeter)


def rectangular_section(depth: float, width: float) -> PileGeometry:
    """Geometry of a closed rectangular or H-shaped envelope.

    Args:
        depth: Section depth (m)
        width: Section width / flange width (m)

    Raises:
        ValueError: If depth or width is not positive.
    """
    if not (depth > 0 and width > 0):
        raise ValueError(
            f"Section dimensions must be positive (depth={depth}, width={width})."
        )
    return PileGeometry(width=width, perimeter=2.0 * (depth + width))
