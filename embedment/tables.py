"""Tabular views of the results: plain records for JSON and pandas frames."""

from __future__ import annotations

import math

import pandas as pd

from .correlation import CorrelationBlock
from .design import EmbeddingDesign
from .horizontal import HorizontalResult, HorizontalTable
from .summary import PositionSummary
from .vertical import VerticalTable


def _clean(v):
    """NaN/inf -> None so records serialise to strict JSON."""
    if isinstance(v, float) and not math.isfinite(v):
        return None
    return v


def _clean_record(d: dict) -> dict:
    return {k: _clean(v) for k, v in d.items()}


def horizontal_result_record(r: HorizontalResult) -> dict:
    return _clean_record({
        "ok": r.ok,
        "status": r.status.value,
        "message": r.message,
        "t_m": r.t,
        "theta_min_deg": r.theta_deg,
        "A_m": r.wedge.a if r.wedge else math.nan,
        "l_m": r.wedge.l if r.wedge else math.nan,
        "F_m2": r.wedge.f if r.wedge else math.nan,
        "Eph_kN": r.eph,
        "EphErf_kN": r.eph_required,
        "sigmaEph_kN_m2": r.sigma_eph,
        "deltaT_m": r.delta_t,
        "Eph2_kN": r.eph2,
        "L_h_m": r.length,
        "iterations": r.iterations,
    })


def horizontal_records(table: HorizontalTable) -> list[dict]:
    out = []
    for row in table.rows:
        rec = {"position": row.position, "layer": row.layer,
               "H_Ed_kN": _clean(row.H_ed), "M_Ed_kNm": _clean(row.M_ed)}
        rec.update(horizontal_result_record(row.result))
        out.append(rec)
    return out


def vertical_records(table: VerticalTable) -> list[dict]:
    return [
        _clean_record({
            "position": r.position,
            "layer": r.layer,
            "tau_kN_m2": r.tau,
            "R_per_m_kN_m": r.lengths.resistance_per_m,
            "NEd_compression_kN": r.compression_ed,
            "L_D_m": r.lengths.length_compression,
            "NEd_tension_kN": r.tension_ed,
            "L_Z_m": r.lengths.length_tension,
            "governing": r.lengths.governing.value,
            "L_v_m": r.lengths.length,
        })
        for r in table.rows
    ]


def correlation_records(blocks: list[CorrelationBlock]) -> list[dict]:
    return [
        _clean_record({
            "position": b.position,
            "support": b.support,
            "zone": b.zone,
            "index": r.index,
            "layer": r.layer,
            "thickness_m": r.thickness,
            "governing_m": r.governing,
            "criterion": r.criterion.value,
            "share_pct": r.share_pct,
            "remaining_pct": r.remaining_pct,
            "top_depth_m": r.top_depth,
            "depth_used_m": r.depth_used,
            "cumulative_depth_m": r.cumulative_depth,
        })
        for b in blocks
        for r in b.rows
    ]


def summary_records(summary: list[PositionSummary]) -> list[dict]:
    return [
        _clean_record({
            "position": s.position,
            "support": s.support,
            "zone": s.zone,
            "governing": s.governing.value,
            "L_req_m": s.required_depth,
            "L_recommended_m": s.recommended_depth,
            "satisfied": s.satisfied,
        })
        for s in summary
    ]


def design_record(design: EmbeddingDesign) -> dict:
    """Whole design as a JSON-ready dict."""
    return {
        "ok": design.ok,
        "messages": design.messages,
        "horizontal": {
            "ok": design.horizontal.ok,
            "message": design.horizontal.message,
            "rows": horizontal_records(design.horizontal),
        },
        "vertical": {
            "ok": design.vertical.ok,
            "message": design.vertical.message,
            "excluded_layers": design.vertical.excluded_layers,
            "rows": vertical_records(design.vertical),
        },
        "correlation": [
            {
                "position": b.position,
                "total_depth_m": b.total_depth,
                "profile_depth_m": b.profile_depth,
                "satisfied": b.satisfied,
                "remaining_pct": b.remaining * 100,
            }
            for b in design.correlation
        ],
        "correlation_rows": correlation_records(design.correlation),
        "summary": summary_records(design.summary),
        "protocol": design.protocol,
    }


# --- DataFrames ---

def horizontal_frame(table: HorizontalTable) -> pd.DataFrame:
    return pd.DataFrame(horizontal_records(table))


def vertical_frame(table: VerticalTable) -> pd.DataFrame:
    return pd.DataFrame(vertical_records(table))


def correlation_frame(blocks: list[CorrelationBlock]) -> pd.DataFrame:
    return pd.DataFrame(correlation_records(blocks))


def summary_frame(summary: list[PositionSummary]) -> pd.DataFrame:
    return pd.DataFrame(summary_records(summary))


def depth_matrix(design: EmbeddingDesign) -> pd.DataFrame:
    """Position x layer matrix of L_h, L_v and the governing max of the two."""
    h = horizontal_frame(design.horizontal)
    v = vertical_frame(design.vertical)
    cols = ["position", "layer"]
    h = h[cols + ["L_h_m"]] if not h.empty else pd.DataFrame(columns=cols + ["L_h_m"])
    v = v[cols + ["L_v_m"]] if not v.empty else pd.DataFrame(columns=cols + ["L_v_m"])
    m = h.merge(v, on=cols, how="outer")
    m["L_gov_m"] = m[["L_h_m", "L_v_m"]].astype(float).max(axis=1, skipna=True)
    return m
