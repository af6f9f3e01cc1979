"""Shared fixtures for sales board tests."""

from __future__ import annotations

import random
from datetime import datetime, timedelta

import pytest

from salesboard.mock_data import generate_snapshot
from salesboard.snapshot import Snapshot


class FakeClock:
    """Callable clock the tests move by hand."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def set(self, ts: datetime) -> datetime:
        self.now = ts
        return ts

    def advance(self, seconds: float = 1) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


class StubFetch:
    """
    Async fetch callable for DataStore.
    Pops queued results (a Snapshot or an exception to raise); otherwise builds a fresh snapshot.
    An optional asyncio.Event holds every call until it is set.
    """

    def __init__(self, clock: FakeClock):
        self._clock = clock
        self._rng = random.Random(7)
        self.calls = 0
        self.results: list = []
        self.gate = None

    def make(self) -> Snapshot:
        return generate_snapshot(self._clock(), rng=self._rng)

    async def __call__(self) -> Snapshot:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        result = self.results.pop(0) if self.results else self.make()
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 19, 13, 19, 58))


@pytest.fixture
def stub_fetch(clock) -> StubFetch:
    return StubFetch(clock)


@pytest.fixture
def sample_snapshot() -> Snapshot:
    """Mock snapshot at 13:25, so the latest settled bucket is 13:10."""
    return generate_snapshot(datetime(2026, 10, 19, 13, 25, 0), rng=random.Random(42))


@pytest.fixture
def sample_payload() -> dict:
    return {
        "data": [
            {
                "branch": "fyndiq",
                "barData": [{"time": "00:00", "thisYear": 1500.4, "lastYear": 900}],
                "lineData": [
                    {"id": "2026", "data": [{"x": "00:00", "y": 1500.4}]},
                    {"id": "2025", "data": [{"x": "00:00", "y": 900}]},
                ],
            },
            {
                "branch": "cdon",
                "barData": [{"time": "00:00", "thisYear": 1000, "lastYear": 800}],
                "lineData": [
                    {"id": "2026", "data": [{"x": "00:00", "y": 1000}]},
                    {"id": "2025", "data": [{"x": "00:00", "y": 800}]},
                ],
            },
        ],
        "latestInterval": {
            "time": "00:00",
            "branches": [
                {"branch": "fyndiq", "gmvThisYear": 1500, "gmvLastYear": 900,
                 "cumulativeThisYear": 1500, "cumulativeLastYear": 900,
                 "cumulativeLastYearFullDay": 120000},
                {"branch": "cdon", "gmvThisYear": 1000, "gmvLastYear": 800,
                 "cumulativeThisYear": 1000, "cumulativeLastYear": 800,
                 "cumulativeLastYearFullDay": 90000},
            ],
        },
        "metric": "gmv",
        "lastUpdated": "2026-10-19T00:11:00",
        "mock": False,
    }

