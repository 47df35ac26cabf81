import pytest

from embedment.correlation import CorrelationBlock, CorrelationRow, Criterion
from embedment.loads import LoadCase
from embedment.summary import governing_criterion, summarize, worst_zone


def _block(position, total, support="", zone="", rows=None, remaining=0.0):
    return CorrelationBlock(position=position, rows=rows or [], total_depth=total,
                            remaining=remaining, support=support, zone=zone)


def _row(layer, used, criterion):
    return CorrelationRow(index=1, layer=layer, thickness=2.0, governing=4.0,
                          criterion=criterion, share_pct=50.0, remaining_pct=50.0,
                          depth_used=used, cumulative_depth=used)


@pytest.mark.parametrize(
    "zones, expected",
    [
        (["green", "red", "yellow"], "red"),
        (["green", "yellow"], "yellow"),
        (["green"], "green"),
        (["", "other"], "other"),
        ([], ""),
    ],
)
def test_worst_zone(zones, expected):
    assert worst_zone(zones) == expected


def test_governing_criterion_follows_largest_depth():
    block = _block("P1", 4.0, rows=[
        _row("A", 1.8, Criterion.HORIZONTAL),
        _row("B", 2.2, Criterion.VERTICAL),
    ])
    assert governing_criterion(block) == Criterion.VERTICAL


def test_governing_criterion_without_depth():
    assert governing_criterion(_block("P1", 0.0)) == Criterion.NONE
    block = _block("P1", 0.0, rows=[_row("A", 0.0, Criterion.HORIZONTAL)])
    assert governing_criterion(block) == Criterion.NONE


def test_summary_sorted_by_support_zone_and_name():
    blocks = [
        _block("P3", 3.0, "long", "green"),
        _block("P2", 2.0, "short", "red"),
        _block("P1", 1.0, "short", "red"),
        _block("P4", 4.0, "short", "green"),
    ]
    out = summarize(blocks)
    assert [s.position for s in out] == ["P4", "P1", "P2", "P3"]


def test_summary_uses_worst_zone_of_all_load_rows():
    loads = [LoadCase("P1", zone="green"), LoadCase("P1", zone="yellow")]
    out = summarize([_block("P1", 2.0, "short", "green")], loads)
    assert out[0].zone == "yellow"


def test_extra_safety_added_to_recommended_depth():
    out = summarize([_block("P1", 2.5, remaining=0.1)], extra_safety=0.3)
    s = out[0]
    assert s.required_depth == 2.5
    assert s.recommended_depth == pytest.approx(2.8)
    assert not s.satisfied
