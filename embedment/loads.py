"""Load positions and design factors."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from .config import DEFAULTS
from .units import parse_decimal


class DeltaMode(str, Enum):
    """How the wall friction angle delta is chosen."""
    HALF_PHI = "half_phi"
    INPUT = "input"


@dataclass(frozen=True)
class LoadCase:
    """Raw (unfactored) loads at one support position."""
    position: str
    compression: float = 0.0   # N_d (kN, >= 0)
    tension: float = 0.0       # N_z (kN, >= 0)
    horizontal: float = 0.0    # H (kN)
    moment: float = 0.0        # M (kNm)
    support: str = ""          # "short" | "long"
    zone: str = ""             # "green" | "yellow" | "red"


@dataclass(frozen=True)
class DesignLoad:
    """Factored loads at one position."""
    position: str
    compression: float    # N_Ed,D = N_d * gamma_D (kN)
    tension: float        # N_Ed,Z = N_z * gamma_Z (kN)
    horizontal: float     # H_Ed = H * eta (kN)
    moment: float         # M_Ed = M * eta (kNm)


@dataclass(frozen=True)
class DesignFactors:
    """Partial safety and amplification factors."""
    gamma_d: float = 1.3      # Compression
    gamma_z: float = 1.3      # Tension
    alpha_c: float = 1.0      # Cohesion reduction
    eta: float = 1.4          # Horizontal force and moment
    delta_mode: DeltaMode | str = DeltaMode.HALF_PHI
    delta_deg: float = math.nan

    def wall_friction_angle(self, phi_deg: float) -> float:
        """delta (degrees): the input value in INPUT mode, else phi / 2."""
        if self.delta_mode == DeltaMode.INPUT and math.isfinite(self.delta_deg):
            return self.delta_deg
        return 0.5 * phi_deg

    def design_load(self, load: LoadCase) -> DesignLoad:
        """Apply the factors once to a raw load case."""
        return DesignLoad(
            position=load.position,
            compression=load.compression * self.gamma_d,
            tension=load.tension * self.gamma_z,
            horizontal=load.horizontal * self.eta,
            moment=load.moment * self.eta,
        )

    @classmethod
    def from_dict(cls, d: dict | None) -> "DesignFactors":
        """Build from a request ``factors`` record; blank entries use defaults.

        Entries that are present but unparsable stay NaN so validation can
        report them.
        """
        d = d or {}
        defaults = DEFAULTS["factors"]

        def _num(key):
            v = d.get(key)
            if v is None or (isinstance(v, str) and not v.strip()):
                v = defaults[key]
            return parse_decimal(v)

        mode = str(d.get("deltaMode") or defaults["deltaMode"])
        try:
            delta_mode = DeltaMode(mode)
        except ValueError:
            delta_mode = DeltaMode.HALF_PHI

        return cls(
            gamma_d=_num("gammaD"),
            gamma_z=_num("gammaZ"),
            alpha_c=_num("alphaC"),
            eta=_num("eta"),
            delta_mode=delta_mode,
            delta_deg=parse_decimal(d.get("delta_deg")),
        )


def _non_negative(v: float) -> float:
    return max(0.0, v) if math.isfinite(v) else 0.0


def build_load_case_from_dict(r: dict, index: int = 1) -> LoadCase:
    """Build a LoadCase from a request record.

    Missing vertical loads count as zero. Missing H or M stay NaN so the
    horizontal calculation can flag the position.
    """
    position = str(r.get("position") or "").strip() or f"Position {index}"
    return LoadCase(
        position=position,
        compression=_non_negative(parse_decimal(r.get("compression_kN"))),
        tension=_non_negative(parse_decimal(r.get("tension_kN"))),
        horizontal=parse_decimal(r.get("H_kN")),
        moment=parse_decimal(r.get("M_kNm")),
        support=str(r.get("support") or "").strip(),
        zone=str(r.get("zone") or "").strip(),
    )


def build_load_cases(records: list[dict] | None) -> list[LoadCase]:
    return [build_load_case_from_dict(r, i + 1) for i, r in enumerate(records or [])]
