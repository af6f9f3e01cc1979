# salesboard/summary_view.py
# Labels and bar geometry for the two summary screens.

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from salesboard.snapshot import METRIC_ORDERS, IntervalBranch, Snapshot

INTERVAL_REFERENCE_HEIGHT = 50      # largest last-year interval value
CUMULATIVE_REFERENCE_HEIGHT = 80    # largest last-year full-day total


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_metric(value: float, metric: str = "gmv") -> str:
    """1.23 M / 456 K / 789. Orders are always plain counts."""
    if metric == METRIC_ORDERS:
        return f"{value:.0f}"
    if value >= 1_000_000:
        return f"{value / 1_000_000:.2f} M"
    if value >= 1_000:
        return f"{_round_half_up(value / 1_000)} K"
    return f"{value:.0f}"


def percent_change(from_value: float, to_value: float) -> float:
    if from_value == 0:
        return 0.0
    return (to_value - from_value) / from_value * 100


def format_percent_change(percent: float) -> str:
    rounded = _round_half_up(percent)
    sign = "+" if rounded >= 0 else ""
    return f"{sign}{rounded}%"


def format_absolute_change(from_value: float, to_value: float, metric: str = "gmv") -> str:
    diff = to_value - from_value
    sign = "+" if diff >= 0 else "-"
    return f"{sign}{format_metric(abs(diff), metric)}"


def interval_start_time(end_time: str) -> str:
    """'18:20' -> '18:10', '00:05' -> '23:55'."""
    hours, minutes = (int(part) for part in end_time.split(":"))
    minutes -= 10
    if minutes < 0:
        minutes += 60
        hours = (hours - 1) % 24
    return f"{hours:02d}:{minutes:02d}"


# -----------------------------
# Bars
# -----------------------------
@dataclass(frozen=True)
class BarConfig:
    id: str
    value: int
    height_percent: float
    label: str
    is_this_year: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "value": self.value,
            "heightPercent": self.height_percent,
            "label": self.label,
            "isThisYear": self.is_this_year,
        }


@dataclass(frozen=True)
class BranchBars:
    branch: str
    bars: tuple
    percent_label: str
    absolute_label: str
    positive: bool

    def to_dict(self) -> dict:
        return {
            "branch": self.branch,
            "bars": [b.to_dict() for b in self.bars],
            "percentChange": self.percent_label,
            "absoluteChange": self.absolute_label,
            "positive": self.positive,
        }


def _scale(reference_height: float, largest: int) -> float:
    return reference_height / largest if largest > 0 else 1.0


def interval_bar_heights(
    branches: Sequence[IntervalBranch], year: int, metric: str = "gmv"
) -> list[BranchBars]:
    """The largest last-year value sits at half height, leaving room to double."""
    if not branches:
        return []
    factor = _scale(INTERVAL_REFERENCE_HEIGHT, max(b.last_year for b in branches))

    out = []
    for b in branches:
        change = percent_change(b.last_year, b.this_year)
        out.append(BranchBars(
            branch=b.branch,
            bars=(
                BarConfig("lastYear", b.last_year, b.last_year * factor, str(year - 1)),
                BarConfig("thisYear", b.this_year, b.this_year * factor, str(year), True),
            ),
            percent_label=format_percent_change(change),
            absolute_label=format_absolute_change(b.last_year, b.this_year, metric),
            positive=change >= 0,
        ))
    return out


def cumulative_bar_heights(
    branches: Sequence[IntervalBranch], year: int, metric: str = "gmv"
) -> list[BranchBars]:
    """Last year so far, today so far, last year whole day; the largest whole day at 80%."""
    if not branches:
        return []
    factor = _scale(CUMULATIVE_REFERENCE_HEIGHT, max(b.cumulative_last_year_full_day for b in branches))

    out = []
    for b in branches:
        change = percent_change(b.cumulative_last_year, b.cumulative_this_year)
        out.append(BranchBars(
            branch=b.branch,
            bars=(
                BarConfig(
                    "lastYearSoFar", b.cumulative_last_year,
                    b.cumulative_last_year * factor, f"Right now\nin {year - 1}",
                ),
                BarConfig(
                    "thisYearSoFar", b.cumulative_this_year,
                    b.cumulative_this_year * factor, "Today\nso far", True,
                ),
                BarConfig(
                    "lastYearFullDay", b.cumulative_last_year_full_day,
                    b.cumulative_last_year_full_day * factor, f"End of day\nin {year - 1}",
                ),
            ),
            percent_label=format_percent_change(change),
            absolute_label=format_absolute_change(b.cumulative_last_year, b.cumulative_this_year, metric),
            positive=change >= 0,
        ))
    return out


# -----------------------------
# View
# -----------------------------
@dataclass(frozen=True)
class SummaryView:
    s: Snapshot

    @property
    def available(self) -> bool:
        return self.s is not None and self.s.latest_interval is not None

    @property
    def year(self) -> int:
        return self.s.fetched_at.year

    @property
    def interval_title(self) -> Optional[str]:
        if not self.available:
            return None
        if self.s.metric == METRIC_ORDERS:
            return "Orders during the past 10 minutes"
        return "Sales during past 10 minutes"

    @property
    def interval_range_label(self) -> Optional[str]:
        if not self.available:
            return None
        end = self.s.latest_interval.time
        return f"{interval_start_time(end)}–{end}"

    @property
    def progress_title(self) -> Optional[str]:
        if not self.available:
            return None
        return f"Progress at {self.s.latest_interval.time}"

    @property
    def interval_bars(self) -> list[BranchBars]:
        if not self.available:
            return []
        return interval_bar_heights(self.s.latest_interval.branches, self.year, self.s.metric)

    @property
    def cumulative_bars(self) -> list[BranchBars]:
        if not self.available:
            return []
        return cumulative_bar_heights(self.s.latest_interval.branches, self.year, self.s.metric)

    def to_dict(self) -> dict:
        return {
            "metric": self.s.metric if self.s is not None else None,
            "time": self.s.latest_interval.time if self.available else None,
            "intervalTitle": self.interval_title,
            "intervalRange": self.interval_range_label,
            "progressTitle": self.progress_title,
            "interval": [b.to_dict() for b in self.interval_bars],
            "cumulative": [b.to_dict() for b in self.cumulative_bars],
        }
