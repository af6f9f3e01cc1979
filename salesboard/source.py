# salesboard/source.py
from __future__ import annotations

import asyncio
import random
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional

import requests

from salesboard.errors import FetchFailed, NoDataForBucket
from salesboard.mock_data import DEFAULT_BRANCHES, generate_snapshot
from salesboard.snapshot import Snapshot, snapshot_from_payload
from system.log_utils import debug, warn


class SalesSource(ABC):
    """Fetch contract consumed by the DataStore: succeed with a Snapshot or raise."""

    @abstractmethod
    async def fetch_snapshot(self) -> Snapshot:
        ...


class HttpSalesSource(SalesSource):
    """
    GET <url> returning the sales JSON payload.
    The blocking request runs on a worker thread so the board's event loop keeps ticking.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 20.0,
        primary_branch: Optional[str] = "cdon",
        session: Optional[requests.Session] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.url = url
        self.timeout = timeout
        self.primary_branch = primary_branch
        self._session = session or requests.Session()
        self._clock = clock

    async def fetch_snapshot(self) -> Snapshot:
        return await asyncio.to_thread(self._fetch_blocking)

    def _fetch_blocking(self) -> Snapshot:
        debug(f"[SOURCE] GET {self.url}")
        try:
            resp = self._session.get(
                self.url,
                timeout=self.timeout,
                headers={"Cache-Control": "no-store"},
            )
        except requests.RequestException as e:
            raise FetchFailed(f"Sales endpoint unreachable: {e}") from e

        if not resp.ok:
            message = f"Sales endpoint returned HTTP {resp.status_code}"
            try:
                body = resp.json()
                if isinstance(body, dict) and body.get("error"):
                    message = str(body["error"])
            except ValueError:
                pass
            raise FetchFailed(message, status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as e:
            raise FetchFailed(f"Sales endpoint returned invalid JSON: {e}") from e

        snapshot = snapshot_from_payload(payload, fetched_at=self._clock(), primary_branch=self.primary_branch)
        if not snapshot.branches:
            raise NoDataForBucket("Sales endpoint has no rows yet")
        if snapshot.mock:
            warn("[SOURCE] upstream answered with mock data")
        return snapshot


class MockSalesSource(SalesSource):
    """In-process generator for development and demos."""

    def __init__(
        self,
        metric: str = "gmv",
        primary_branch: Optional[str] = "cdon",
        seed: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
        branches=DEFAULT_BRANCHES,
    ):
        self.metric = metric
        self.primary_branch = primary_branch
        self.branches = tuple(branches)
        self._rng = random.Random(seed)
        self._clock = clock

    async def fetch_snapshot(self) -> Snapshot:
        return generate_snapshot(
            self._clock(),
            metric=self.metric,
            branches=self.branches,
            rng=self._rng,
            primary_branch=self.primary_branch,
        )
