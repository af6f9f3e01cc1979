"""Tests for summary screen labels and bar geometry."""

import dataclasses

import pytest

from salesboard.snapshot import IntervalBranch
from salesboard.summary_view import (
    SummaryView,
    cumulative_bar_heights,
    format_absolute_change,
    format_metric,
    format_percent_change,
    interval_bar_heights,
    interval_start_time,
    percent_change,
)


def _branch(name, this_year, last_year, cum_this=0, cum_last=0, full_day=0):
    return IntervalBranch(name, this_year, last_year, cum_this, cum_last, full_day)


@pytest.mark.parametrize("value,metric,expected", [
    (1_234_567, "gmv", "1.23 M"),
    (456_400, "gmv", "456 K"),
    (2_500, "gmv", "3 K"),
    (999, "gmv", "999"),
    (12_345, "orders", "12345"),
])
def test_format_metric(value, metric, expected):
    assert format_metric(value, metric) == expected


def test_percent_change():
    assert percent_change(100, 120) == pytest.approx(20.0)
    assert percent_change(0, 50) == 0


@pytest.mark.parametrize("percent,expected", [
    (20.0, "+20%"),
    (-10.2, "-10%"),
    (0.0, "+0%"),
    (12.5, "+13%"),
])
def test_format_percent_change(percent, expected):
    assert format_percent_change(percent) == expected


def test_format_absolute_change():
    assert format_absolute_change(100_000, 300_000) == "+200 K"
    assert format_absolute_change(300_000, 200_000) == "-100 K"
    assert format_absolute_change(10, 4, "orders") == "-6"


@pytest.mark.parametrize("end,start", [
    ("18:20", "18:10"),
    ("10:00", "09:50"),
    ("00:05", "23:55"),
])
def test_interval_start_time(end, start):
    assert interval_start_time(end) == start


class TestBarHeights:
    def test_interval_largest_last_year_at_half(self):
        bars = interval_bar_heights([_branch("cdon", 300, 100), _branch("fyndiq", 150, 200)], year=2026)
        cdon, fyndiq = bars
        assert fyndiq.bars[0].height_percent == pytest.approx(50.0)
        assert cdon.bars[0].height_percent == pytest.approx(25.0)
        assert cdon.bars[1].height_percent == pytest.approx(75.0)
        assert [b.label for b in cdon.bars] == ["2025", "2026"]
        assert cdon.percent_label == "+200%"
        assert fyndiq.positive is False

    def test_cumulative_full_day_at_eighty(self):
        bars = cumulative_bar_heights(
            [_branch("cdon", 0, 0, 400, 500, 1000), _branch("fyndiq", 0, 0, 100, 100, 500)], year=2026,
        )
        cdon = bars[0]
        assert [b.id for b in cdon.bars] == ["lastYearSoFar", "thisYearSoFar", "lastYearFullDay"]
        assert cdon.bars[2].height_percent == pytest.approx(80.0)
        assert cdon.bars[0].height_percent == pytest.approx(40.0)
        assert cdon.percent_label == "-20%"

    def test_zero_reference_does_not_divide(self):
        bars = interval_bar_heights([_branch("cdon", 5, 0)], year=2026)
        assert bars[0].bars[1].height_percent == 5

    def test_empty(self):
        assert interval_bar_heights([], year=2026) == []


class TestSummaryView:
    def test_titles(self, sample_snapshot):
        view = SummaryView(sample_snapshot)
        assert view.available
        assert view.interval_title == "Sales during past 10 minutes"
        assert view.interval_range_label == "13:00–13:10"
        assert view.progress_title == "Progress at 13:10"

    def test_to_dict(self, sample_snapshot):
        out = SummaryView(sample_snapshot).to_dict()
        assert out["time"] == "13:10"
        assert [b["branch"] for b in out["interval"]] == ["cdon", "fyndiq"]
        assert len(out["cumulative"][0]["bars"]) == 3

    def test_without_interval(self, sample_snapshot):
        bare = dataclasses.replace(sample_snapshot, latest_interval=None)
        view = SummaryView(bare)
        assert not view.available
        assert view.interval_title is None
        assert view.to_dict()["interval"] == []
