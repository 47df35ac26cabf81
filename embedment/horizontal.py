"""Horizontally loaded pile in a slope after Vogt (1988).

For a trial pivot depth t the passive earth resistance Eph of a planar
wedge is minimised over the slip-plane angle theta. The pivot depth is then
adjusted by a directional step-halving search until Eph matches the
resistance required by H and M, and a depth allowance is added on top:

    Eph_erf = (H * t + M) / (t / 3)
    sigma_Eph = 2 * Eph / t
    dt = 0.54 * (Eph - H) / sigma_Eph
    L_h = t + dt

All divisions are guarded; singular geometry is reported as a failed
result instead of producing inf or NaN depths.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from .config import SolverSettings
from .loads import DeltaMode, DesignFactors, LoadCase
from .pile import PileGeometry
from .protocol import Protocol, Status
from .soil import SoilLayer
from .units import deg2rad, fmt, is_finite, parse_decimal, safe_div

logger = logging.getLogger(__name__)

METHOD = "Vogt (1988) horizontal"


# ============================================================================
# Earth resistance of one wedge
# ============================================================================

@dataclass
class Wedge:
    """Passive wedge for one (t, theta) pair."""
    theta_deg: float
    a: float            # Auxiliary length A = t / (tan theta + tan beta) (m)
    l: float            # Slip-plane length (m)
    f: float            # Wedge area (m^2)
    k_c: float          # Combined cohesion / friction force (kN)
    k_g: float          # Weight force F * gamma * b (kN)
    k_cr: float         # Wedge-side cohesion F * c (kN)
    k_rr: float         # Wedge-side friction (kN)
    denominator: float
    ep: float           # Earth resistance Ep (kN)
    eph: float          # Horizontal component Ep * cos(delta) (kN)


def passive_resistance(
    theta_deg: float,
    t: float,
    beta: float,
    phi: float,
    delta: float,
    c: float,
    gamma: float,
    b: float,
) -> Wedge:
    """Earth resistance of the wedge with slip angle theta at depth t.

    Args:
        theta_deg: Slip-plane angle (degrees)
        t: Pivot depth (m)
        beta, phi, delta: Slope, friction and wall friction angle (radians)
        c: Design cohesion (kN/m^2)
        gamma: Unit weight (kN/m^3)
        b: Pile width (m)
    """
    theta = deg2rad(theta_deg)

    a = safe_div(t, math.tan(theta) + math.tan(beta))
    l = a * math.cos(theta)
    f = a * t / 2

    k_c_base = l * c * b
    k_g = f * gamma * b
    k_cr = f * c
    k_rr = f * (t / 3) * gamma * (1 - math.sin(phi)) * math.tan(phi)
    k_c = k_c_base + 2 * (k_cr + k_rr)

    sin_tp = math.sin(theta + phi)
    cos_tp = math.cos(theta + phi)

    t1 = k_c * (safe_div(math.cos(theta), sin_tp) + safe_div(math.sin(theta), cos_tp))
    t2 = safe_div(k_g, cos_tp)
    denominator = safe_div(math.cos(delta), sin_tp) - safe_div(math.sin(delta), cos_tp)

    ep = safe_div(t1 + t2, denominator)
    eph = ep * math.cos(delta)

    return Wedge(
        theta_deg=theta_deg, a=a, l=l, f=f,
        k_c=k_c, k_g=k_g, k_cr=k_cr, k_rr=k_rr,
        denominator=denominator, ep=ep, eph=eph,
    )


@dataclass
class ThetaSearch:
    best: Wedge
    evaluations: int
    capped: bool = False


def find_theta_min(
    t: float,
    beta: float,
    phi: float,
    delta: float,
    c: float,
    gamma: float,
    b: float,
    settings: SolverSettings | None = None,
) -> ThetaSearch:
    """Minimise Ep over theta at a fixed depth t.

    Starting at theta = 5 deg with a 5 deg step, theta advances while Ep
    keeps decreasing; otherwise the step is halved in place. A trial at or
    beyond 89 deg is never evaluated; the step is halved instead. The search
    ends once the step is <= 0.1 deg. The returned wedge is the lowest Ep
    evaluated, not the last angle visited.
    """
    s = settings or SolverSettings()

    theta = s.theta_start
    dtheta = s.dtheta_start
    best = passive_resistance(theta, t, beta, phi, delta, c, gamma, b)
    evaluations = 1

    while abs(dtheta) > s.dtheta_min and theta < s.theta_max:
        if evaluations >= s.max_theta_iterations:
            return ThetaSearch(best=best, evaluations=evaluations, capped=True)

        trial_theta = theta + dtheta
        if trial_theta >= s.theta_max:
            dtheta = dtheta / 2
            continue

        trial = passive_resistance(trial_theta, t, beta, phi, delta, c, gamma, b)
        evaluations += 1

        if is_finite(trial.ep, best.ep) and trial.ep < best.ep:
            theta = trial_theta
            best = trial
            continue

        dtheta = dtheta / 2

    return ThetaSearch(best=best, evaluations=evaluations)


# ============================================================================
# Pivot depth search
# ============================================================================

@dataclass
class HorizontalResult:
    """Result of one Vogt calculation (one position x one layer)."""
    status: Status
    message: str = ""
    t: float = math.nan             # Pivot depth (m)
    theta_deg: float = math.nan     # theta at minimum Ep (deg)
    eph: float = math.nan           # Available earth resistance (kN)
    eph_required: float = math.nan  # Required earth resistance (kN)
    sigma_eph: float = math.nan     # 2 * Eph / t (kN/m^2)
    delta_t: float = math.nan       # Depth allowance (m)
    eph2: float = math.nan          # Check value 2 * sigma_Eph * dt (kN)
    length: float = math.nan        # L_h = t + delta_t (m)
    iterations: int = 0
    final_step: float = math.nan    # Last depth step dt (m)
    wedge: Wedge | None = None
    protocol: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == Status.CONVERGED


def _fail(status: Status, message: str, prot: Protocol, **values) -> HorizontalResult:
    prot.add(f"FAILED ({status.value}): {message}")
    logger.warning("%s: %s", METHOD, message)
    return HorizontalResult(status=status, message=message, protocol=prot.lines, **values)


def solve_vogt(
    beta_deg: float,
    phi_deg: float,
    c: float,
    gamma: float,
    delta_deg: float,
    b: float,
    H: float,
    M: float,
    settings: SolverSettings | None = None,
) -> HorizontalResult:
    """Required embedment of a horizontally loaded pile in a slope.

    Args:
        beta_deg: Slope angle beta (degrees)
        phi_deg: Friction angle phi (degrees)
        c: Design cohesion (kN/m^2)
        gamma: Unit weight (kN/m^3)
        delta_deg: Wall friction angle delta (degrees)
        b: Pile width (m)
        H: Design horizontal force (kN), already factored
        M: Design moment at ground (kNm), already factored
        settings: Start depth, start step and iteration caps

    Returns:
        HorizontalResult; ``status`` is CONVERGED on success.
    """
    s = settings or SolverSettings()
    prot = Protocol()
    prot.add(f"{METHOD}: pile in slope, single-layer equilibrium")

    if not is_finite(beta_deg, phi_deg, c, gamma, delta_deg, b, H, M, s.t_start, s.dt_start):
        return _fail(Status.INVALID_INPUT, "Incomplete or non-numeric input.", prot)
    if not (b > 0 and gamma > 0 and s.t_start > 0):
        return _fail(Status.INVALID_INPUT, "b, gamma and start depth t must be positive.", prot)
    if c < 0:
        return _fail(Status.INVALID_INPUT, "Cohesion c must not be negative.", prot)
    if s.dt_start == 0:
        return _fail(Status.INVALID_INPUT, "Start depth step dt must not be zero.", prot)

    beta = deg2rad(beta_deg)
    phi = deg2rad(phi_deg)
    delta = deg2rad(delta_deg)

    prot.add(
        f"Input: beta={fmt(beta_deg, 1)}° phi={fmt(phi_deg, 1)}° c={fmt(c)} kN/m² "
        f"gamma={fmt(gamma, 1)} kN/m³ delta={fmt(delta_deg, 2)}° b={fmt(b, 3)} m"
    )
    prot.add(
        f"Loads: H={fmt(H)} kN, M={fmt(M)} kNm, start t={fmt(s.t_start)} m, "
        f"dt={fmt(abs(s.dt_start), 3)} m"
    )
    prot.blank()

    t = s.t_start
    dt = abs(s.dt_start)
    search: ThetaSearch | None = None
    eph_required = math.nan

    for iteration in range(1, s.max_iterations + 1):
        if t <= 0:
            return _fail(
                Status.GUARD_FAILURE, f"Pivot depth left the valid range (t={fmt(t, 3)} m).",
                prot, iterations=iteration, final_step=dt,
            )

        search = find_theta_min(t, beta, phi, delta, c, gamma, b, s)
        if search.capped:
            return _fail(
                Status.NOT_CONVERGED, f"Slip-angle search did not finish at t={fmt(t, 3)} m.",
                prot, iterations=iteration, final_step=dt,
            )

        eph = search.best.eph
        eph_required = safe_div(H * t + M, t / 3)

        prot.add(
            f"t={fmt(t, 3)} m: theta_min={fmt(search.best.theta_deg, 2)}° "
            f"Eph={fmt(eph)} kN | Eph_erf={fmt(eph_required)} kN | dt={fmt(dt, 3)} m"
        )
        logger.debug("t=%.4f eph=%.4f eph_required=%.4f dt=%.4f", t, eph, eph_required, dt)

        if not is_finite(eph, eph_required):
            return _fail(
                Status.GUARD_FAILURE, f"Earth resistance is not finite at t={fmt(t, 3)} m.",
                prot, iterations=iteration, final_step=dt,
            )

        # Resistance insufficient: go deeper
        if dt > 0 and eph < eph_required:
            t += dt
            continue
        # Resistance excessive: retreat
        if dt < 0 and eph > eph_required:
            t += dt
            continue

        dt = -dt / 2
        if abs(dt) > s.dt_min:
            t += dt
            continue
        break
    else:
        return _fail(
            Status.NOT_CONVERGED,
            f"No equilibrium depth within {s.max_iterations} iterations (last t={fmt(t, 3)} m).",
            prot, iterations=s.max_iterations, final_step=dt,
        )

    best = search.best
    sigma_eph = safe_div(2 * best.eph, t)
    delta_t = s.depth_factor * safe_div(best.eph - H, sigma_eph)
    if not is_finite(sigma_eph, delta_t):
        return _fail(
            Status.GUARD_FAILURE, "Depth allowance is not finite.",
            prot, iterations=iteration, final_step=dt,
        )
    eph2 = sigma_eph * 2 * delta_t
    length = t + delta_t

    prot.blank()
    prot.add(f"sigma_Eph = 2*Eph/t = {fmt(sigma_eph)} kN/m²")
    prot.add(f"Δt = {s.depth_factor}*(Eph - H)/sigma_Eph = {fmt(delta_t, 3)} m")
    prot.add(f"Eph2 = 2*sigma_Eph*Δt = {fmt(eph2)} kN")
    prot.add(f"Required pile depth: t + Δt = {fmt(length, 3)} m")

    return HorizontalResult(
        status=Status.CONVERGED,
        t=t,
        theta_deg=best.theta_deg,
        eph=best.eph,
        eph_required=eph_required,
        sigma_eph=sigma_eph,
        delta_t=delta_t,
        eph2=eph2,
        length=length,
        iterations=iteration,
        final_step=dt,
        wedge=best,
        protocol=prot.lines,
    )


def horizontal_from_record(record: dict) -> HorizontalResult:
    """Single-case entry point taking a flat record of decimal strings.

    H and M are used as given (no eta factor).
    """
    base = SolverSettings()
    t_start = parse_decimal(record.get("t_start_m"))
    dt_start = parse_decimal(record.get("dt_start_m"))
    settings = SolverSettings(
        t_start=t_start if math.isfinite(t_start) else base.t_start,
        dt_start=dt_start if math.isfinite(dt_start) else base.dt_start,
    )
    return solve_vogt(
        beta_deg=parse_decimal(record.get("beta_deg")),
        phi_deg=parse_decimal(record.get("phi_deg")),
        c=parse_decimal(record.get("cohesion_kN_m2")),
        gamma=parse_decimal(record.get("gamma_kN_m3")),
        delta_deg=parse_decimal(record.get("delta_deg")),
        b=parse_decimal(record.get("b_m")),
        H=parse_decimal(record.get("H_kN")),
        M=parse_decimal(record.get("M_kNm")),
        settings=settings,
    )


# ============================================================================
# Table: every load position x every soil layer
# ============================================================================

@dataclass
class HorizontalRow:
    position: str
    layer: str
    H_ed: float         # kN
    M_ed: float         # kNm
    result: HorizontalResult

    @property
    def length(self) -> float:
        """L_h (m); NaN unless the calculation converged."""
        return self.result.length if self.result.ok else math.nan


@dataclass
class HorizontalTable:
    ok: bool
    message: str = ""
    rows: list[HorizontalRow] = field(default_factory=list)
    protocol: list[str] = field(default_factory=list)

    def for_position(self, position: str) -> list[HorizontalRow]:
        return [r for r in self.rows if r.position == position]


def horizontal_table(
    layers: list[SoilLayer],
    loads: list[LoadCase],
    factors: DesignFactors,
    pile: PileGeometry,
    settings: SolverSettings | None = None,
) -> HorizontalTable:
    """Required horizontal depth L_h for each position in each single layer.

    Loads are raw; H and M are multiplied by eta here. Per-row failures are
    flagged on the row and never stop the table.
    """
    s = settings or SolverSettings()
    prot = Protocol()
    prot.add(f"{METHOD} - single-layer approach")
    prot.add("Eph_erf = (H*t + M)/(t/3); L_h = t + Δt")
    prot.blank()

    if not pile.has_width:
        return HorizontalTable(ok=False, message="Pile width b is missing or invalid.",
                               protocol=prot.lines)
    if not (is_finite(factors.eta, factors.alpha_c) and factors.eta > 0 and factors.alpha_c >= 0):
        return HorizontalTable(ok=False, message="Factors eta and alpha_c are missing or invalid.",
                               protocol=prot.lines)
    if not layers:
        return HorizontalTable(ok=False, message="No soil layers given.", protocol=prot.lines)
    if not loads:
        return HorizontalTable(ok=False, message="No load positions given.", protocol=prot.lines)

    prot.add(f"b = {fmt(pile.width, 3)} m, eta = {fmt(factors.eta)}, alpha_c = {fmt(factors.alpha_c)}")
    prot.add(f"delta mode: {_delta_label(factors)}")
    prot.blank()

    rows: list[HorizontalRow] = []
    for load in loads:
        H_ed = load.horizontal * factors.eta
        M_ed = load.moment * factors.eta
        prot.rule(f"Position: {load.position}")
        prot.add(f"H = {fmt(load.horizontal)} kN -> H_Ed = {fmt(H_ed)} kN")
        prot.add(f"M = {fmt(load.moment)} kNm -> M_Ed = {fmt(M_ed)} kNm")

        for layer in layers:
            if not layer.participates:
                result = HorizontalResult(
                    status=Status.INVALID_INPUT,
                    message="Layer thickness and unit weight must be positive.",
                )
            else:
                result = solve_vogt(
                    beta_deg=layer.beta_deg,
                    phi_deg=layer.phi,
                    c=layer.design_cohesion(factors.alpha_c),
                    gamma=layer.gamma,
                    delta_deg=factors.wall_friction_angle(layer.phi),
                    b=pile.width,
                    H=H_ed,
                    M=M_ed,
                    settings=s,
                )
            rows.append(HorizontalRow(load.position, layer.name, H_ed, M_ed, result))

            if result.ok:
                prot.add(
                    f"  - {layer.name}: t={fmt(result.t, 3)} m theta={fmt(result.theta_deg, 2)}° "
                    f"Eph={fmt(result.eph)} kN Eph_erf={fmt(result.eph_required)} kN "
                    f"Δt={fmt(result.delta_t, 3)} m => L_h={fmt(result.length, 2)} m"
                )
            else:
                prot.add(f"  - {layer.name}: no result ({result.status.value}) {result.message}")
        prot.blank()

    return HorizontalTable(ok=True, rows=rows, protocol=prot.lines)


def _delta_label(factors: DesignFactors) -> str:
    if factors.delta_mode == DeltaMode.INPUT and math.isfinite(factors.delta_deg):
        return f"delta = {fmt(factors.delta_deg, 2)}° (input)"
    return "delta = phi/2"
