"""Tests for the HTTP and mock sales sources."""

import asyncio
from datetime import datetime

import pytest
import requests

from salesboard.errors import FetchFailed, NoDataForBucket
from salesboard.source import HttpSalesSource, MockSalesSource

URL = "http://sales.test/api/sales"
NOW = datetime(2026, 10, 19, 13, 25)


class FakeResponse:
    def __init__(self, status_code=200, body=None, invalid_json=False):
        self.status_code = status_code
        self._body = body
        self._invalid_json = invalid_json

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value")
        return self._body


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.requests = []

    def get(self, url, timeout=None, headers=None):
        self.requests.append((url, timeout, headers))
        if self.exc is not None:
            raise self.exc
        return self.response


def _fetch(session, **kwargs):
    source = HttpSalesSource(URL, timeout=5, session=session, clock=lambda: NOW, **kwargs)
    return asyncio.run(source.fetch_snapshot())


class TestHttpSalesSource:
    def test_success(self, sample_payload):
        session = FakeSession(FakeResponse(body=sample_payload))
        snap = _fetch(session)
        assert [b.branch for b in snap.branches] == ["cdon", "fyndiq"]
        assert snap.fetched_at == NOW
        url, timeout, headers = session.requests[0]
        assert (url, timeout) == (URL, 5)
        assert headers["Cache-Control"] == "no-store"

    def test_upstream_error_message(self):
        session = FakeSession(FakeResponse(500, {"error": "Database unavailable"}))
        with pytest.raises(FetchFailed) as exc:
            _fetch(session)
        assert str(exc.value) == "Database unavailable"
        assert exc.value.status_code == 500

    def test_upstream_error_without_body(self):
        session = FakeSession(FakeResponse(502, invalid_json=True))
        with pytest.raises(FetchFailed) as exc:
            _fetch(session)
        assert "502" in str(exc.value)

    def test_transport_error(self):
        session = FakeSession(exc=requests.ConnectionError("refused"))
        with pytest.raises(FetchFailed):
            _fetch(session)

    def test_invalid_json(self):
        session = FakeSession(FakeResponse(200, invalid_json=True))
        with pytest.raises(FetchFailed):
            _fetch(session)

    def test_no_rows_yet(self):
        session = FakeSession(FakeResponse(body={"data": [], "latestInterval": None, "metric": "gmv"}))
        with pytest.raises(NoDataForBucket):
            _fetch(session)


class TestMockSalesSource:
    def test_seeded_snapshot(self):
        source = MockSalesSource(seed=3, clock=lambda: NOW)
        snap = asyncio.run(source.fetch_snapshot())
        assert snap.mock
        assert snap.fetched_at == NOW
        assert snap.latest_interval.time == "13:10"

    def test_metric_and_primary(self):
        source = MockSalesSource(metric="orders", primary_branch="fyndiq", seed=3, clock=lambda: NOW)
        snap = asyncio.run(source.fetch_snapshot())
        assert snap.metric == "orders"
        assert snap.branches[0].branch == "fyndiq"
