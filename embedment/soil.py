"""Soil layer model for sloped, layered profiles."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from .units import parse_decimal


class SlopeMode(str, Enum):
    """Banded slope input. Slopes of 0-15 deg are always evaluated at 15 deg."""
    UP_TO_15 = "0_15"
    ABOVE_15 = "gt_15"


MIN_SLOPE_DEG = 15.0


@dataclass(frozen=True)
class SoilLayer:
    """Single soil layer with properties."""
    name: str
    thickness: float                 # m
    gamma: float                     # Unit weight (kN/m^3)
    phi: float                       # Friction angle (degrees)
    cohesion: float = 0.0            # c (kN/m^2)
    shaft_friction: float = 0.0      # tau (kN/m^2)
    slope_mode: SlopeMode | str = SlopeMode.UP_TO_15
    slope_deg: float = math.nan      # User slope (degrees), used for ABOVE_15

    @property
    def beta_deg(self) -> float:
        """Slope angle used in the calculation (degrees)."""
        if self.slope_mode == SlopeMode.ABOVE_15:
            return self.slope_deg
        return MIN_SLOPE_DEG

    def design_cohesion(self, alpha_c: float = 1.0) -> float:
        """Cohesion reduced by the factor alpha_c (kN/m^2)."""
        if not math.isfinite(self.cohesion):
            return math.nan
        return alpha_c * self.cohesion

    @property
    def participates(self) -> bool:
        """Thickness and unit weight must be finite and positive."""
        return (
            math.isfinite(self.thickness) and self.thickness > 0
            and math.isfinite(self.gamma) and self.gamma > 0
        )


@dataclass
class SoilProfile:
    """Soil profile of stacked layers, ordered top to bottom."""
    layers: list[SoilLayer] = field(default_factory=list)

    @property
    def thicknesses(self) -> np.ndarray:
        t = np.array([l.thickness for l in self.layers], dtype=float)
        return np.where(np.isfinite(t) & (t > 0), t, 0.0)

    @property
    def bottom_depths(self) -> np.ndarray:
        return np.cumsum(self.thicknesses)

    @property
    def top_depths(self) -> np.ndarray:
        return self.bottom_depths - self.thicknesses

    @property
    def total_thickness(self) -> float:
        return float(self.thicknesses.sum())

    def layer_at_depth(self, depth: float) -> SoilLayer | None:
        """Return the layer at a given depth (m)."""
        for layer, top, bot in zip(self.layers, self.top_depths, self.bottom_depths):
            if top <= depth < bot:
                return layer
        if self.layers and abs(depth - self.total_thickness) < 1e-9:
            return self.layers[-1]
        return None

    def names(self) -> list[str]:
        return [l.name for l in self.layers]


# --- Soil Layer Construction Helper ---

def build_soil_layer_from_dict(ld: dict, index: int = 1) -> SoilLayer:
    """Build a SoilLayer from a request record of decimal strings.

    Missing values become NaN so the calculation can flag the layer
    instead of failing the whole request.
    """
    name = str(ld.get("name") or "").strip() or f"Layer {index}"
    mode = str(ld.get("slopeMode") or SlopeMode.UP_TO_15.value)
    try:
        slope_mode = SlopeMode(mode)
    except ValueError:
        slope_mode = SlopeMode.UP_TO_15

    return SoilLayer(
        name=name,
        thickness=parse_decimal(ld.get("thickness_m")),
        gamma=parse_decimal(ld.get("unitWeight_kN_m3")),
        phi=parse_decimal(ld.get("phi_deg")),
        cohesion=parse_decimal(ld.get("cohesion_kN_m2")),
        shaft_friction=parse_decimal(ld.get("shaftFriction_kN_m2")),
        slope_mode=slope_mode,
        slope_deg=parse_decimal(ld.get("slope_deg")),
    )


def build_soil_layers(records: list[dict] | None) -> list[SoilLayer]:
    return [build_soil_layer_from_dict(ld, i + 1) for i, ld in enumerate(records or [])]
