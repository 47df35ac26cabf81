import json
import math

import pandas as pd
import pytest

from embedment.design import calculate, calculate_from_body
from embedment.pile import PileGeometry
from embedment.tables import (
    correlation_frame, depth_matrix, design_record, horizontal_frame, summary_frame,
    vertical_frame,
)


@pytest.fixture
def body():
    return {
        "layers": [
            {"name": "S1 sand", "thickness_m": "1,8", "slopeMode": "0_15",
             "unitWeight_kN_m3": "18", "phi_deg": "30", "cohesion_kN_m2": "0",
             "shaftFriction_kN_m2": "5"},
            {"name": "S2 clay", "thickness_m": "3,4", "slopeMode": "gt_15", "slope_deg": "20",
             "unitWeight_kN_m3": "19", "phi_deg": "22,5", "cohesion_kN_m2": "10",
             "shaftFriction_kN_m2": "20"},
        ],
        "loads": [
            {"position": "P1", "compression_kN": "20,1", "tension_kN": "5", "H_kN": "5",
             "M_kNm": "10", "support": "short", "zone": "green"},
            {"position": "P2", "compression_kN": "8", "tension_kN": "15", "H_kN": "8",
             "M_kNm": "20", "support": "long", "zone": "red"},
        ],
        "factors": {"gammaD": "1,3", "gammaZ": "1,3", "alphaC": "1", "eta": "1,4"},
        "pile": {"b_m": "0,2", "U_m": "0,5978"},
        "extra_safety_m": "0,2",
    }


def test_full_run_from_request_body(body):
    design = calculate_from_body(body)

    assert design.ok
    assert design.messages == []
    assert design.horizontal.ok and design.vertical.ok
    assert len(design.horizontal.rows) == 4
    assert len(design.vertical.rows) == 4
    assert [s.position for s in design.summary] == ["P1", "P2"]
    for s in design.summary:
        assert s.required_depth > 0
        assert s.recommended_depth == pytest.approx(s.required_depth + 0.2)
    assert any(l.startswith("P1: required") for l in design.protocol)


def test_matches_direct_call(body, sand, clay, loads, factors, pile):
    direct = calculate([sand, clay], loads, factors, pile)
    parsed = calculate_from_body(body)
    for a, b in zip(direct.correlation, parsed.correlation):
        assert a.total_depth == pytest.approx(b.total_depth)


def test_missing_width_keeps_vertical_results(body):
    body["pile"] = {"U_m": "0,5978"}
    design = calculate_from_body(body)

    assert design.ok
    assert not design.horizontal.ok
    assert design.vertical.ok
    assert len(design.messages) == 1 and "width" in design.messages[0]
    assert all(s.required_depth > 0 for s in design.summary)


def test_nothing_computable(sand, loads):
    design = calculate([sand], loads, pile=PileGeometry(math.nan, math.nan))
    assert not design.ok
    assert len(design.messages) == 2
    assert design.correlation == []
    assert design.summary == []
    assert design.protocol


def test_empty_body():
    design = calculate_from_body({})
    assert not design.ok


def test_design_record_is_strict_json(body):
    body["loads"][0]["M_kNm"] = ""
    record = design_record(calculate_from_body(body))
    text = json.dumps(record, allow_nan=False)
    assert '"protocol"' in text
    p1 = [r for r in record["horizontal"]["rows"] if r["position"] == "P1"]
    assert all(r["status"] == "invalid_input" and r["L_h_m"] is None for r in p1)


def test_frames(body):
    design = calculate_from_body(body)

    h = horizontal_frame(design.horizontal)
    v = vertical_frame(design.vertical)
    c = correlation_frame(design.correlation)
    s = summary_frame(design.summary)
    assert len(h) == 4 and {"position", "layer", "L_h_m", "theta_min_deg"} <= set(h.columns)
    assert len(v) == 4 and {"L_D_m", "L_Z_m", "governing"} <= set(v.columns)
    assert set(c["position"]) == {"P1", "P2"}
    assert list(s["position"]) == ["P1", "P2"]


def test_depth_matrix(body):
    design = calculate_from_body(body)
    m = depth_matrix(design)

    assert len(m) == 4
    expected = m[["L_h_m", "L_v_m"]].max(axis=1)
    pd.testing.assert_series_equal(m["L_gov_m"], expected, check_names=False)


def test_depth_matrix_without_horizontal(body):
    body["pile"] = {"U_m": "0,5978"}
    m = depth_matrix(calculate_from_body(body))
    assert len(m) == 4
    assert m["L_h_m"].isna().all()
    assert (m["L_gov_m"] == m["L_v_m"]).all()
