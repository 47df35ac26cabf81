import math

import pytest

from embedment.correlation import (
    Criterion, apportion, correlate, governing_depth, governing_depths,
)
from embedment.horizontal import horizontal_table
from embedment.loads import DesignFactors
from embedment.pile import PileGeometry
from embedment.soil import SoilLayer
from embedment.vertical import vertical_table


def _layer(name, thickness):
    return SoilLayer(name=name, thickness=thickness, gamma=18.0, phi=30.0, shaft_friction=5.0)


@pytest.fixture
def two_layers():
    return [_layer("A", 1.8), _layer("B", 3.4)]


def test_demand_spread_over_two_layers(two_layers):
    block = apportion("P1", two_layers, {"A": 4.0, "B": 4.0})
    a, b = block.rows

    assert a.depth_used == pytest.approx(1.8)
    assert a.share_pct == pytest.approx(45.0)
    assert a.remaining_pct == pytest.approx(55.0)
    assert b.depth_used == pytest.approx(2.2)
    assert b.share_pct == pytest.approx(55.0)
    assert [r.cumulative_depth for r in block.rows] == pytest.approx([1.8, 4.0])
    assert [r.top_depth for r in block.rows] == pytest.approx([0.0, 1.8])
    assert block.total_depth == pytest.approx(4.0)
    assert block.remaining == pytest.approx(0.0, abs=1e-12)
    assert block.satisfied


def test_first_layer_covers_everything(two_layers):
    block = apportion("P1", two_layers, {"A": 1.2, "B": 4.0})
    assert len(block.rows) == 1
    assert block.total_depth == pytest.approx(1.2)
    assert block.satisfied


def test_stronger_lower_layer_needs_less_depth(two_layers):
    block = apportion("P1", two_layers, {"A": 6.0, "B": 2.0})
    # 1.8 / 6.0 = 30 % in A, the remaining 70 % of 2.0 m in B
    assert block.rows[1].depth_used == pytest.approx(1.4)
    assert block.total_depth == pytest.approx(3.2)


def test_profile_too_shallow(two_layers, caplog):
    block = apportion("P1", two_layers, {"A": 10.0, "B": 10.0})
    assert not block.satisfied
    assert block.total_depth == pytest.approx(5.2)
    assert block.remaining == pytest.approx(0.48)
    assert block.profile_depth == pytest.approx(5.2)
    assert block.rows[-1].cumulative_depth == pytest.approx(5.2)
    assert any("WARNING" in l for l in block.protocol)
    assert "not covered" in caplog.text


def test_layers_without_depth_are_skipped(two_layers):
    layers = [_layer("top", 0.5)] + two_layers
    block = apportion("P1", layers, {"top": math.nan, "A": 4.0, "B": 4.0})
    top = block.rows[0]
    assert top.depth_used == 0.0
    assert math.isnan(top.share_pct)
    assert top.remaining_pct == pytest.approx(100.0)
    assert top.cumulative_depth == 0.0
    assert [r.cumulative_depth for r in block.rows] == pytest.approx([0.0, 1.8, 4.0])
    assert [r.top_depth for r in block.rows] == pytest.approx([0.0, 0.5, 2.3])
    assert block.total_depth == pytest.approx(4.0)
    assert [r.index for r in block.rows] == [1, 2, 3]


def test_zero_thickness_layer_is_skipped(two_layers):
    layers = [_layer("gap", 0.0)] + two_layers
    block = apportion("P1", layers, {"gap": 2.0, "A": 4.0, "B": 4.0})
    assert block.rows[0].depth_used == 0.0
    assert block.total_depth == pytest.approx(4.0)


def test_apportion_is_idempotent(two_layers):
    gov = {"A": 4.5, "B": 3.1}
    first = apportion("P1", two_layers, gov)
    second = apportion("P1", two_layers, gov)
    assert first.rows == second.rows
    assert first.total_depth == second.total_depth


@pytest.mark.parametrize("la, lb", [(4.0, 4.0), (2.5, 7.0), (9.0, 1.0), (1.0, 1.0)])
def test_shares_add_up_when_satisfied(two_layers, la, lb):
    block = apportion("P1", two_layers, {"A": la, "B": lb})
    assert block.satisfied
    assert sum(r.share_pct for r in block.rows) == pytest.approx(100.0, abs=1e-6)
    if la == lb:
        assert block.total_depth == pytest.approx(la, abs=1e-6)


def test_governing_depth_criteria():
    assert governing_depth(3.0, 2.0).criterion == Criterion.HORIZONTAL
    assert governing_depth(2.0, 3.0).criterion == Criterion.VERTICAL
    assert governing_depth(2.0, 2.0).criterion == Criterion.VERTICAL
    g = governing_depth(math.nan, 2.5)
    assert g.length == 2.5 and g.criterion == Criterion.VERTICAL
    g = governing_depth(1.5, math.nan)
    assert g.length == 1.5 and g.criterion == Criterion.HORIZONTAL
    g = governing_depth(math.nan, math.nan)
    assert math.isnan(g.length) and g.criterion == Criterion.NONE


def test_correlate_one_block_per_position(sand, clay, pile, loads, factors):
    layers = [sand, clay]
    h = horizontal_table(layers, loads, factors, pile)
    v = vertical_table(layers, loads, factors, pile)
    blocks = correlate(layers, h, v, loads)

    assert [b.position for b in blocks] == ["P1", "P2"]
    assert blocks[0].support == "short" and blocks[1].zone == "red"

    gov = governing_depths(h.for_position("P1"), v.for_position("P1"))
    assert list(gov) == ["S1 sand", "S2 clay"]
    for row in blocks[0].rows:
        assert row.governing == pytest.approx(gov[row.layer].length)
        assert row.criterion == gov[row.layer].criterion
    assert blocks[0].total_depth > 0


def test_correlate_with_vertical_only(sand, clay, pile, loads, factors):
    layers = [sand, clay]
    h = horizontal_table(layers, loads, factors, PileGeometry(math.nan, pile.perimeter))
    v = vertical_table(layers, loads, factors, pile)
    blocks = correlate(layers, h, v, loads)
    assert not h.ok
    assert all(r.criterion in (Criterion.VERTICAL, Criterion.NONE)
               for b in blocks for r in b.rows)


def test_layer_without_thickness_counts_as_zero(two_layers):
    layers = two_layers[:1] + [_layer("lens", math.nan)] + two_layers[1:]
    block = apportion("P1", layers, {"A": 4.0, "lens": 4.0, "B": 4.0})
    lens = block.rows[1]
    assert lens.thickness == 0.0
    assert lens.depth_used == 0.0
    assert lens.cumulative_depth == pytest.approx(1.8)
    assert block.rows[2].top_depth == pytest.approx(1.8)
    assert block.total_depth == pytest.approx(4.0)
