"""
Unit tests for the query cache and the invalidation graph.
"""

import asyncio

import pytest

from app.client.cache import QueryCache, make_key
from app.client.invalidation import affected_families


class FakeClock:

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestQueryKeys:

    def test_param_order_does_not_matter(self):
        assert make_key("jobs", "list", {"skip": 0, "limit": 20}) == make_key("jobs", "list", {"limit": 20, "skip": 0})

    def test_different_params_are_different_keys(self):
        assert make_key("jobs", "list", {"skip": 0}) != make_key("jobs", "list", {"skip": 20})


class TestStaleness:

    def test_missing_entry_is_stale(self):
        assert QueryCache().is_stale(make_key("skills", "list"))

    def test_entry_fresh_until_stale_time(self):
        clock = FakeClock()
        cache = QueryCache(stale_time=30, clock=clock)
        key = make_key("skills", "list")
        cache.set(key, ["Go"])

        clock.now += 29
        assert not cache.is_stale(key)

        clock.now += 1
        assert cache.is_stale(key)

    def test_invalidate_marks_family_only(self):
        cache = QueryCache(stale_time=30)
        skills = make_key("skills", "list")
        jobs = make_key("jobs", "list")
        cache.set(skills, [])
        cache.set(jobs, [])

        assert cache.invalidate("skills") == 1

        assert cache.is_stale(skills)
        assert not cache.is_stale(jobs)
        # Data stays available while the refetch runs
        assert cache.get(skills).data == []

    def test_set_clears_invalidation(self):
        cache = QueryCache(stale_time=30)
        key = make_key("skills", "list")
        cache.set(key, [])
        cache.invalidate("skills")

        cache.set(key, ["Go"])
        assert not cache.is_stale(key)


class TestFetch:

    @pytest.mark.asyncio
    async def test_fresh_entry_is_served_without_fetching(self):
        cache = QueryCache(stale_time=30)
        key = make_key("skills", "list")
        calls = []

        async def fetcher():
            calls.append(1)
            return ["Go"]

        assert await cache.fetch(key, fetcher) == ["Go"]
        assert await cache.fetch(key, fetcher) == ["Go"]
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_force_refetches(self):
        cache = QueryCache(stale_time=30)
        key = make_key("skills", "list")
        results = iter([["Go"], ["Go", "Rust"]])

        async def fetcher():
            return next(results)

        await cache.fetch(key, fetcher)

        assert await cache.fetch(key, fetcher, force=True) == ["Go", "Rust"]

    @pytest.mark.asyncio
    async def test_concurrent_fetches_share_one_request(self):
        cache = QueryCache(stale_time=30)
        key = make_key("jobs", "list")
        calls = []

        async def fetcher():
            calls.append(1)
            await asyncio.sleep(0.01)
            return ["job"]

        results = await asyncio.gather(cache.fetch(key, fetcher), cache.fetch(key, fetcher))

        assert results == [["job"], ["job"]]
        assert len(calls) == 1
        assert not cache.is_fetching(key)

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_shared_fetch(self):
        cache = QueryCache(stale_time=30)
        key = make_key("jobs", "list")
        calls = []

        async def fetcher():
            calls.append(1)
            await asyncio.sleep(0.01)
            return ["job"]

        first = asyncio.ensure_future(cache.fetch(key, fetcher))
        second = asyncio.ensure_future(cache.fetch(key, fetcher))
        await asyncio.sleep(0)
        first.cancel()

        assert await second == ["job"]
        assert first.cancelled()
        assert len(calls) == 1
        assert cache.get(key).data == ["job"]

    @pytest.mark.asyncio
    async def test_invalidation_during_fetch_stores_stale_result(self):
        cache = QueryCache(stale_time=30)
        key = make_key("skills", "list")
        release = asyncio.Event()

        async def fetcher():
            await release.wait()
            return ["Go"]

        pending = asyncio.ensure_future(cache.fetch(key, fetcher))
        await asyncio.sleep(0)
        cache.invalidate("skills")
        release.set()

        assert await pending == ["Go"]
        assert cache.get(key).data == ["Go"]
        assert cache.is_stale(key)

    @pytest.mark.asyncio
    async def test_other_family_invalidation_keeps_result_fresh(self):
        cache = QueryCache(stale_time=30)
        key = make_key("skills", "list")
        release = asyncio.Event()

        async def fetcher():
            await release.wait()
            return ["Go"]

        pending = asyncio.ensure_future(cache.fetch(key, fetcher))
        await asyncio.sleep(0)
        cache.invalidate("jobs")
        release.set()
        await pending

        assert not cache.is_stale(key)

    @pytest.mark.asyncio
    async def test_failed_fetch_leaves_cache_untouched(self):
        cache = QueryCache(stale_time=30)
        key = make_key("jobs", "list")

        async def fetcher():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await cache.fetch(key, fetcher)

        assert cache.get(key) is None
        assert not cache.is_fetching(key)


class TestInvalidationGraph:

    def test_skill_mutation_touches_dependent_families(self):
        assert affected_families("skills") == {"skills", "jobs", "jobseekers"}

    def test_job_mutation_only_touches_jobs(self):
        assert affected_families("jobs") == {"jobs"}

    def test_unknown_resource_invalidates_itself(self):
        assert affected_families("applications") == {"applications"}
