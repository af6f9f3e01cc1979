"""Tests for DataStore: staging, commit, and shared in-flight fetches."""

import asyncio

import pytest

from salesboard.errors import FetchFailed, NoDataForBucket, SnapshotError
from salesboard.store import DataStore


class TestLoadAndStage:
    def test_load_initial_sets_active(self, stub_fetch):
        store = DataStore(stub_fetch)
        snap = asyncio.run(store.load_initial())
        assert store.active is snap
        assert store.staged is None

    def test_stage_leaves_active(self, stub_fetch):
        store = DataStore(stub_fetch)

        async def scenario():
            first = await store.load_initial()
            staged = await store.stage()
            return first, staged

        first, staged = asyncio.run(scenario())
        assert store.active is first
        assert store.staged is staged
        assert staged is not first

    def test_stage_failure_keeps_previous_stage(self, stub_fetch):
        store = DataStore(stub_fetch)

        async def scenario():
            await store.load_initial()
            good = await store.stage()
            stub_fetch.results.append(FetchFailed("upstream down"))
            with pytest.raises(FetchFailed):
                await store.stage()
            return good

        good = asyncio.run(scenario())
        assert store.staged is good

    def test_foreign_exception_wrapped(self, stub_fetch):
        store = DataStore(stub_fetch)
        stub_fetch.results.append(ConnectionError("reset"))
        with pytest.raises(FetchFailed):
            asyncio.run(store.load_initial())
        assert store.active is None

    def test_snapshot_errors_pass_through(self, stub_fetch):
        store = DataStore(stub_fetch)
        stub_fetch.results.append(NoDataForBucket("no rows"))
        with pytest.raises(NoDataForBucket):
            asyncio.run(store.load_initial())


class TestCommit:
    def test_commit_is_identity(self, stub_fetch):
        store = DataStore(stub_fetch)

        async def scenario():
            await store.load_initial()
            staged = await store.stage()
            committed = await store.commit_staged()
            return staged, committed

        staged, committed = asyncio.run(scenario())
        assert committed is staged
        assert store.active is staged
        assert store.staged is None
        assert stub_fetch.calls == 2

    def test_commit_without_stage_fetches(self, stub_fetch):
        store = DataStore(stub_fetch)

        async def scenario():
            first = await store.load_initial()
            committed = await store.commit_staged()
            return first, committed

        first, committed = asyncio.run(scenario())
        assert stub_fetch.calls == 2
        assert committed is not first
        assert store.active is committed

    def test_commit_fallback_failure_keeps_active(self, stub_fetch):
        store = DataStore(stub_fetch)

        async def scenario():
            first = await store.load_initial()
            stub_fetch.results.append(FetchFailed("down"))
            with pytest.raises(SnapshotError):
                await store.commit_staged()
            return first

        first = asyncio.run(scenario())
        assert store.active is first

    def test_concurrent_commits_share_one_fetch(self, stub_fetch):
        store = DataStore(stub_fetch)

        async def scenario():
            await store.load_initial()
            stub_fetch.gate = asyncio.Event()
            both = asyncio.gather(store.commit_staged(), store.commit_staged())
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            assert store.fetch_in_flight
            stub_fetch.gate.set()
            return await both

        a, b = asyncio.run(scenario())
        assert stub_fetch.calls == 2    # initial load + one shared fallback
        assert a is b
        assert store.active is a

    def test_stage_joining_commit_fetch_is_not_restaged(self, stub_fetch):
        store = DataStore(stub_fetch)

        async def scenario():
            await store.load_initial()
            stub_fetch.gate = asyncio.Event()
            commit = asyncio.ensure_future(store.commit_staged())
            await asyncio.sleep(0)
            stage = asyncio.ensure_future(store.stage())
            await asyncio.sleep(0)
            stub_fetch.gate.set()
            return await commit, await stage

        committed, staged = asyncio.run(scenario())
        assert committed is staged
        assert store.active is committed
        assert store.staged is None


class TestRefresh:
    def test_refresh_replaces_active(self, stub_fetch):
        store = DataStore(stub_fetch)

        async def scenario():
            first = await store.load_initial()
            second = await store.refresh_now()
            return first, second

        first, second = asyncio.run(scenario())
        assert store.active is second
        assert second is not first

    def test_refresh_failure_keeps_active(self, stub_fetch):
        store = DataStore(stub_fetch)

        async def scenario():
            first = await store.load_initial()
            stub_fetch.results.append(FetchFailed("down"))
            with pytest.raises(FetchFailed):
                await store.refresh_now()
            return first

        first = asyncio.run(scenario())
        assert store.active is first

    def test_discard_staged(self, stub_fetch):
        store = DataStore(stub_fetch)

        async def scenario():
            await store.load_initial()
            await store.stage()
            store.discard_staged()

        asyncio.run(scenario())
        assert store.staged is None


class TestStagedNeverOlderThanActive:
    def test_refresh_drops_older_stage(self, stub_fetch, clock):
        store = DataStore(stub_fetch)

        async def scenario():
            await store.load_initial()
            clock.advance(30)
            await store.stage()
            clock.advance(15)
            fresh = await store.refresh_now()
            clock.advance(15)
            committed = await store.commit_staged()
            return fresh, committed

        fresh, committed = asyncio.run(scenario())
        assert store.staged is None
        assert committed is not fresh
        assert committed.fetched_at > fresh.fetched_at
        assert stub_fetch.calls == 4      # the stale stage was not reused

    def test_load_initial_drops_older_stage(self, stub_fetch, clock):
        store = DataStore(stub_fetch)

        async def scenario():
            await store.stage()
            clock.advance(15)
            return await store.load_initial()

        loaded = asyncio.run(scenario())
        assert store.active is loaded
        assert store.staged is None

    def test_commit_refuses_older_stage(self, stub_fetch, clock):
        store = DataStore(stub_fetch)
        old = stub_fetch.make()
        clock.advance(60)
        stub_fetch.results.append(stub_fetch.make())

        async def scenario():
            await store.load_initial()
            store.staged = old
            clock.advance(10)
            return await store.commit_staged()

        committed = asyncio.run(scenario())
        assert committed is not old
        assert store.active is committed
        assert store.active.fetched_at > old.fetched_at

    def test_stage_keeps_newer_stage_after_refresh(self, stub_fetch, clock):
        store = DataStore(stub_fetch)

        async def scenario():
            await store.load_initial()
            clock.advance(15)
            await store.refresh_now()
            clock.advance(15)
            return await store.stage()

        staged = asyncio.run(scenario())
        assert store.staged is staged
        assert staged.fetched_at > store.active.fetched_at
