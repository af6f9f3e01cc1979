# salesboard/snapshot.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from salesboard.errors import FetchFailed

METRIC_GMV = "gmv"
METRIC_ORDERS = "orders"
METRICS = (METRIC_GMV, METRIC_ORDERS)


@dataclass(frozen=True)
class BarPoint:
    time: str
    this_year: int
    last_year: int


@dataclass(frozen=True)
class LinePoint:
    x: str
    y: int


@dataclass(frozen=True)
class LineSeries:
    id: str
    data: tuple[LinePoint, ...]


@dataclass(frozen=True)
class BranchSeries:
    branch: str
    bar_data: tuple[BarPoint, ...]
    line_data: tuple[LineSeries, ...]


@dataclass(frozen=True)
class IntervalBranch:
    branch: str
    this_year: int
    last_year: int
    cumulative_this_year: int
    cumulative_last_year: int
    cumulative_last_year_full_day: int


@dataclass(frozen=True)
class LatestInterval:
    time: str       # end of the bucket, "HH:MM"
    branches: tuple[IntervalBranch, ...]

    def branch(self, name: str) -> Optional[IntervalBranch]:
        for b in self.branches:
            if b.branch == name:
                return b
        return None


@dataclass(frozen=True)
class Snapshot:
    """
    One fetched reporting cycle. Immutable: updates produce a new Snapshot.
    """
    branches: tuple[BranchSeries, ...]
    latest_interval: Optional[LatestInterval]
    metric: str
    fetched_at: datetime
    mock: bool = False

    def branch(self, name: str) -> Optional[BranchSeries]:
        for b in self.branches:
            if b.branch == name:
                return b
        return None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "data": [
                {
                    "branch": b.branch,
                    "barData": [
                        {"time": p.time, "thisYear": p.this_year, "lastYear": p.last_year}
                        for p in b.bar_data
                    ],
                    "lineData": [
                        {"id": s.id, "data": [{"x": p.x, "y": p.y} for p in s.data]}
                        for s in b.line_data
                    ],
                }
                for b in self.branches
            ],
            "latestInterval": None,
            "metric": self.metric,
            "lastUpdated": self.fetched_at.isoformat(),
            "mock": self.mock,
        }
        if self.latest_interval is not None:
            out["latestInterval"] = {
                "time": self.latest_interval.time,
                "branches": [
                    {
                        "branch": b.branch,
                        "gmvThisYear": b.this_year,
                        "gmvLastYear": b.last_year,
                        "cumulativeThisYear": b.cumulative_this_year,
                        "cumulativeLastYear": b.cumulative_last_year,
                        "cumulativeLastYearFullDay": b.cumulative_last_year_full_day,
                    }
                    for b in self.latest_interval.branches
                ],
            }
        return out


def order_branches(names: Iterable[str], primary_branch: Optional[str] = "cdon") -> list[str]:
    """Primary branch first, the rest alphabetically."""
    return sorted(names, key=lambda n: (n != primary_branch, n))


def _num(value: Any) -> int:
    return int(round(float(value or 0)))


def _parse_fetched_at(payload: Dict[str, Any], fetched_at: Optional[datetime]) -> datetime:
    if fetched_at is not None:
        return fetched_at
    raw = payload.get("lastUpdated")
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.now()


def snapshot_from_payload(
    payload: Dict[str, Any],
    fetched_at: Optional[datetime] = None,
    primary_branch: Optional[str] = "cdon",
) -> Snapshot:
    """
    Build a Snapshot from the sales endpoint's JSON body.
    Raises FetchFailed on a structurally invalid payload.
    """
    if not isinstance(payload, dict):
        raise FetchFailed("Sales payload is not a JSON object")

    try:
        by_name: Dict[str, BranchSeries] = {}
        for item in payload.get("data") or []:
            series = BranchSeries(
                branch=str(item["branch"]),
                bar_data=tuple(
                    BarPoint(time=str(p["time"]), this_year=_num(p.get("thisYear")), last_year=_num(p.get("lastYear")))
                    for p in item.get("barData") or []
                ),
                line_data=tuple(
                    LineSeries(
                        id=str(s["id"]),
                        data=tuple(LinePoint(x=str(p["x"]), y=_num(p.get("y"))) for p in s.get("data") or []),
                    )
                    for s in item.get("lineData") or []
                ),
            )
            by_name[series.branch] = series

        latest = None
        raw_latest = payload.get("latestInterval")
        if raw_latest:
            interval_branches = {
                str(b["branch"]): IntervalBranch(
                    branch=str(b["branch"]),
                    this_year=_num(b.get("gmvThisYear")),
                    last_year=_num(b.get("gmvLastYear")),
                    cumulative_this_year=_num(b.get("cumulativeThisYear")),
                    cumulative_last_year=_num(b.get("cumulativeLastYear")),
                    cumulative_last_year_full_day=_num(b.get("cumulativeLastYearFullDay")),
                )
                for b in raw_latest.get("branches") or []
            }
            latest = LatestInterval(
                time=str(raw_latest["time"]),
                branches=tuple(interval_branches[n] for n in order_branches(interval_branches, primary_branch)),
            )
    except (KeyError, TypeError, ValueError) as e:
        raise FetchFailed(f"Malformed sales payload: {e}") from e

    metric = payload.get("metric") or METRIC_GMV
    if metric not in METRICS:
        raise FetchFailed(f"Unknown metric: {metric!r}")

    return Snapshot(
        branches=tuple(by_name[n] for n in order_branches(by_name, primary_branch)),
        latest_interval=latest,
        metric=metric,
        fetched_at=_parse_fetched_at(payload, fetched_at),
        mock=bool(payload.get("mock", False)),
    )
