# salesboard/mock_data.py
# Development-only snapshot generator, used when the real sales endpoint is
# unavailable (in-process MockSalesSource and the sim/ HTTP server).
from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Optional, Sequence

from salesboard.clock import CadenceConfig, DEFAULT_CADENCE, interval_cutoff
from salesboard.snapshot import (
    METRIC_ORDERS,
    BarPoint,
    BranchSeries,
    IntervalBranch,
    LatestInterval,
    LineSeries,
    LinePoint,
    Snapshot,
    order_branches,
)

DEFAULT_BRANCHES = ("cdon", "fyndiq")

# per-bucket random ranges: (base, spread)
GMV_LAST_YEAR = (50_000, 150_000)
GMV_THIS_YEAR = (60_000, 180_000)
ORDERS_LAST_YEAR = (40, 120)
ORDERS_THIS_YEAR = (50, 140)


def _label(ts: datetime) -> str:
    return ts.strftime("%H:%M")


def _branch_multiplier(index: int) -> float:
    # second branch trades 1.5x the first
    return 1.0 if index == 0 else 1.5


def _generate_branch(
    branch: str,
    index: int,
    day_start: datetime,
    cutoff: datetime,
    metric: str,
    rng: random.Random,
    cadence: CadenceConfig,
) -> tuple[BranchSeries, Optional[IntervalBranch]]:
    last_range, this_range = (
        (ORDERS_LAST_YEAR, ORDERS_THIS_YEAR) if metric == METRIC_ORDERS else (GMV_LAST_YEAR, GMV_THIS_YEAR)
    )
    multiplier = _branch_multiplier(index)

    bars: list[BarPoint] = []
    this_line: list[LinePoint] = []
    last_line: list[LinePoint] = []
    this_cum = 0
    last_cum = 0
    at_cutoff: Optional[tuple[int, int, int, int]] = None

    ts = day_start
    day_end = day_start + timedelta(days=1)
    while ts < day_end:
        label = _label(ts)
        is_past = ts <= cutoff

        last_value = int((rng.random() * last_range[1] + last_range[0]) * multiplier)
        this_value = int((rng.random() * this_range[1] + this_range[0]) * multiplier) if is_past else 0

        bars.append(BarPoint(time=label, this_year=this_value, last_year=last_value))

        last_cum += last_value
        last_line.append(LinePoint(x=label, y=last_cum))
        if is_past:
            this_cum += this_value
            this_line.append(LinePoint(x=label, y=this_cum))
            at_cutoff = (this_value, last_value, this_cum, last_cum)

        ts += timedelta(minutes=cadence.bucket_minutes)

    year = day_start.year
    series = BranchSeries(
        branch=branch,
        bar_data=tuple(bars),
        line_data=(
            LineSeries(id=str(year), data=tuple(this_line)),
            LineSeries(id=str(year - 1), data=tuple(last_line)),
        ),
    )

    interval = None
    if at_cutoff is not None:
        interval = IntervalBranch(
            branch=branch,
            this_year=at_cutoff[0],
            last_year=at_cutoff[1],
            cumulative_this_year=at_cutoff[2],
            cumulative_last_year=at_cutoff[3],
            cumulative_last_year_full_day=last_cum,
        )
    return series, interval


def generate_snapshot(
    now: datetime,
    metric: str = "gmv",
    branches: Sequence[str] = DEFAULT_BRANCHES,
    rng: Optional[random.Random] = None,
    primary_branch: Optional[str] = "cdon",
    cadence: CadenceConfig = DEFAULT_CADENCE,
) -> Snapshot:
    """
    One bar per bucket for the whole of today. Last year is always filled;
    this year only up to interval_cutoff(now). latest_interval describes the
    cutoff bucket, or is None before the first bucket of the day has closed.
    """
    rng = rng or random.Random()
    cutoff = interval_cutoff(now, cadence)
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

    ordered = order_branches(branches, primary_branch)
    series_list: list[BranchSeries] = []
    intervals: list[IntervalBranch] = []
    for index, name in enumerate(branches):
        series, interval = _generate_branch(name, index, day_start, cutoff, metric, rng, cadence)
        series_list.append(series)
        if interval is not None:
            intervals.append(interval)

    by_name = {s.branch: s for s in series_list}
    latest = None
    if intervals:
        by_interval = {b.branch: b for b in intervals}
        latest = LatestInterval(
            time=_label(cutoff),
            branches=tuple(by_interval[n] for n in ordered if n in by_interval),
        )

    return Snapshot(
        branches=tuple(by_name[n] for n in ordered),
        latest_interval=latest,
        metric=metric,
        fetched_at=now,
        mock=True,
    )
