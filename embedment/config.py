"""Solver settings and request defaults."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields

from .units import parse_decimal


# Request-level defaults, keyed like the incoming JSON body
DEFAULTS = {
    "factors": {
        "gammaD": 1.3,
        "gammaZ": 1.3,
        "alphaC": 1.0,
        "eta": 1.4,
        "deltaMode": "half_phi",
        "delta_deg": None,
    },
    "settings": {
        "tStart_m": 3.0,
        "dtStart_m": 1.0,
        "maxIterations": 500,
    },
    "extra_safety_m": 0.0,
}


@dataclass(frozen=True)
class SolverSettings:
    """Numerical controls for the Vogt (1988) searches.

    The outer depth step ``dt_start`` is not given by the 1988 listing;
    1.0 m is a working default and may be overridden per request.
    """
    t_start: float = 3.0            # m, first trial pivot depth
    dt_start: float = 1.0           # m, first depth step (sign is ignored)
    dt_min: float = 0.01            # m, depth search stops once |dt| <= dt_min
    max_iterations: int = 500       # outer depth iterations

    theta_start: float = 5.0        # deg
    dtheta_start: float = 5.0       # deg
    dtheta_min: float = 0.1         # deg
    theta_max: float = 89.0         # deg, never evaluated
    max_theta_iterations: int = 2000

    depth_factor: float = 0.54      # Δt = 0.54 * (Eph - H) / σEph

    @classmethod
    def from_dict(cls, d: dict | None) -> "SolverSettings":
        """Build from a request ``settings`` record; blanks keep the default."""
        d = d or {}
        base = cls()
        t_start = parse_decimal(d.get("tStart_m"))
        dt_start = parse_decimal(d.get("dtStart_m"))
        max_iter = parse_decimal(d.get("maxIterations"))
        return cls(
            t_start=t_start if math.isfinite(t_start) else base.t_start,
            dt_start=dt_start if math.isfinite(dt_start) else base.dt_start,
            max_iterations=int(max_iter) if math.isfinite(max_iter) and max_iter >= 1
            else base.max_iterations,
        )

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}
