"""
Tests for the client data hooks.

Most tests drive the hooks with an httpx.MockTransport so request counts can
be asserted; the last class runs them against the real app over ASGI.
"""

import asyncio
import inspect
import json

import httpx
import pytest

from app.client.cache import QueryCache, make_key
from app.client.config import ClientSettings
from app.client.hooks import (
    ClientContext,
    FormValidationError,
    PreconditionFailed,
    jobs_hooks,
    profile_hooks,
    skills_hooks,
)
from app.client.http import ApiError
from app.client.store import AuthState, SignedIn
from conftest import EMPLOYER_ID, JOB_SEEKER_ID, make_token


def envelope(data=None, status=200, message="OK", error=None):
    return httpx.Response(status, json={"status": status, "message": message, "data": data, "error": error})


def page_of(items, request):
    skip = int(request.url.params["skip"])
    limit = int(request.url.params["limit"])
    return envelope(items[skip:skip + limit])


class Recorder:
    """Mock API that records requests and answers from a handler function."""

    def __init__(self, respond):
        self.respond = respond
        self.requests = []

    async def __call__(self, request):
        self.requests.append(request)
        await asyncio.sleep(0.01)
        response = self.respond(request)
        if inspect.isawaitable(response):
            response = await response
        return response

    def count(self, method, path):
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)


def sign_in(context, token="token", subject=EMPLOYER_ID, role="employer"):
    context.store.dispatch(SignedIn(AuthState(token=token, subject=subject, role=role)))


@pytest.fixture
async def make_context():
    """Build client contexts over a mock transport; all are closed on teardown."""
    contexts = []

    def factory(recorder, signed_in=True):
        context = ClientContext.create(
            ClientSettings(base_url="http://test/api/v1"),
            transport=httpx.MockTransport(recorder),
        )
        if signed_in:
            sign_in(context)
        contexts.append(context)
        return context

    yield factory

    for context in contexts:
        await context.aclose()


@pytest.fixture
async def app_context(override_dependencies):
    """Client context talking to the real app over ASGI."""
    contexts = []

    def factory(role="employer", subject=EMPLOYER_ID):
        context = ClientContext.create(
            ClientSettings(base_url="http://test/api/v1"),
            transport=httpx.ASGITransport(app=override_dependencies),
        )
        sign_in(context, token=make_token(subject, role), subject=subject, role=role)
        contexts.append(context)
        return context

    yield factory

    for context in contexts:
        await context.aclose()


class TestQueries:

    @pytest.mark.asyncio
    async def test_fresh_query_served_from_cache(self, make_context):
        recorder = Recorder(lambda request: envelope([{"id": "1", "name": "Go", "category": None}]))
        skills = skills_hooks(make_context(recorder))

        first = await skills.query()
        second = await skills.query()

        assert first.data == second.data
        assert second.error is None
        assert recorder.count("GET", "/api/v1/skills/") == 1

    @pytest.mark.asyncio
    async def test_concurrent_queries_share_request(self, make_context):
        recorder = Recorder(lambda request: envelope([]))
        jobs = jobs_hooks(make_context(recorder))

        await asyncio.gather(jobs.query(), jobs.query(), jobs.query())

        assert recorder.count("GET", "/api/v1/jobs/") == 1

    @pytest.mark.asyncio
    async def test_stale_query_refetches(self, make_context):
        now = [0.0]
        recorder = Recorder(lambda request: envelope([]))
        context = make_context(recorder)
        context.cache = QueryCache(stale_time=30, clock=lambda: now[0])
        jobs = jobs_hooks(context)

        await jobs.query()
        now[0] = 31.0
        await jobs.query()

        assert recorder.count("GET", "/api/v1/jobs/") == 2

    @pytest.mark.asyncio
    async def test_query_error_is_returned(self, make_context):
        recorder = Recorder(lambda request: envelope(status=500, message="An unexpected error occurred", error="INTERNAL_ERROR"))

        result = await skills_hooks(make_context(recorder)).query()

        assert result.data is None
        assert result.error.status == 500
        assert result.error.error == "INTERNAL_ERROR"

    @pytest.mark.asyncio
    async def test_network_error_has_status_zero(self, make_context):
        def respond(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = await skills_hooks(make_context(Recorder(respond))).query()

        assert result.error.status == 0

    @pytest.mark.asyncio
    async def test_profile_query_requires_sign_in(self, make_context):
        recorder = Recorder(lambda request: envelope({}))
        profile = profile_hooks(make_context(recorder, signed_in=False))

        with pytest.raises(PreconditionFailed):
            await profile.query()

        assert recorder.requests == []


class TestMutations:

    def seed(self, context):
        for family in ("skills", "jobs", "jobseekers"):
            context.cache.set(make_key(family, "list"), [])

    @pytest.mark.asyncio
    async def test_skill_mutation_invalidates_dependents(self, make_context):
        recorder = Recorder(lambda request: envelope({"id": "1", "name": "Go", "category": None}, status=201))
        context = make_context(recorder)
        self.seed(context)

        await skills_hooks(context).create({"name": "Go"})

        for family in ("skills", "jobs", "jobseekers"):
            assert context.cache.is_stale(make_key(family, "list"))

    @pytest.mark.asyncio
    async def test_job_mutation_only_invalidates_jobs(self, make_context):
        recorder = Recorder(lambda request: envelope(None))
        context = make_context(recorder)
        self.seed(context)

        await jobs_hooks(context).delete("abc")

        assert context.cache.is_stale(make_key("jobs", "list"))
        assert not context.cache.is_stale(make_key("skills", "list"))
        assert recorder.count("DELETE", "/api/v1/jobs/abc") == 1

    @pytest.mark.asyncio
    async def test_mutation_during_query_leaves_result_stale(self, make_context):
        """A list fetched before a create lands must not be served as fresh"""
        release = asyncio.Event()

        async def respond(request):
            if request.method == "GET":
                await release.wait()
                return envelope([])
            return envelope({"id": "1", "name": "Go", "category": None}, status=201)

        recorder = Recorder(respond)
        skills = skills_hooks(make_context(recorder))

        pending = asyncio.ensure_future(skills.query())
        await asyncio.sleep(0)
        await skills.create({"name": "Go"})
        release.set()
        result = await pending

        assert result.data == []
        assert result.is_stale

        await skills.query()
        assert recorder.count("GET", "/api/v1/skills/") == 2

    @pytest.mark.asyncio
    async def test_failed_mutation_notifies_and_keeps_cache(self, make_context):
        recorder = Recorder(lambda request: envelope(status=400, message="Skill 'Go' already exists", error="Skill 'Go' already exists"))
        context = make_context(recorder)
        self.seed(context)

        with pytest.raises(ApiError) as exc_info:
            await skills_hooks(context).create({"name": "Go"})

        assert exc_info.value.status == 400
        notifications = context.store.state.notifications
        assert [(n.level, n.message) for n in notifications] == [("error", "Skill 'Go' already exists")]
        assert not context.cache.is_stale(make_key("skills", "list"))

    @pytest.mark.asyncio
    async def test_invalid_form_sends_nothing(self, make_context):
        recorder = Recorder(lambda request: envelope(None))
        jobs = jobs_hooks(make_context(recorder))

        with pytest.raises(FormValidationError) as exc_info:
            await jobs.create({"title": "", "description": "short"})

        assert "title" in exc_info.value.errors
        assert "description" in exc_info.value.errors
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_partial_update_sends_only_given_fields(self, make_context):
        recorder = Recorder(lambda request: envelope({}))

        await skills_hooks(make_context(recorder)).update("abc", {"category": None})

        assert recorder.requests[0].method == "PUT"
        assert json.loads(recorder.requests[0].content) == {"category": None}

    @pytest.mark.asyncio
    async def test_mutation_requires_sign_in(self, make_context):
        recorder = Recorder(lambda request: envelope(None))
        skills = skills_hooks(make_context(recorder, signed_in=False))

        with pytest.raises(PreconditionFailed):
            await skills.create({"name": "Go"})

        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_requests_carry_bearer_token(self, make_context):
        recorder = Recorder(lambda request: envelope(None))

        await jobs_hooks(make_context(recorder)).delete("abc")

        assert recorder.requests[0].headers["Authorization"] == "Bearer token"


class TestInfiniteQuery:

    ITEMS = [{"id": f"s{i}"} for i in range(5)]

    def respond(self, request):
        return page_of(self.ITEMS, request)

    @pytest.mark.asyncio
    async def test_loads_pages_until_exhausted(self, make_context):
        recorder = Recorder(self.respond)
        query = jobs_hooks(make_context(recorder)).infinite_query(page_size=2)

        while query.has_next_page:
            await query.fetch_next_page()

        assert [p["token"] for p in query.pages] == [0, 2, 4]
        assert query.items == self.ITEMS
        assert not query.has_next_page
        assert len(recorder.requests) == 3

    @pytest.mark.asyncio
    async def test_concurrent_fetches_request_page_once(self, make_context):
        recorder = Recorder(self.respond)
        query = jobs_hooks(make_context(recorder)).infinite_query(page_size=2)

        await asyncio.gather(query.fetch_next_page(), query.fetch_next_page())

        skips = [r.url.params["skip"] for r in recorder.requests]
        assert skips == ["0"]
        assert [p["token"] for p in query.pages] == [0]
        assert not query.is_fetching_next_page

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_page_request(self, make_context):
        recorder = Recorder(self.respond)
        query = jobs_hooks(make_context(recorder)).infinite_query(page_size=2)

        first = asyncio.ensure_future(query.fetch_next_page())
        second = asyncio.ensure_future(query.fetch_next_page())
        await asyncio.sleep(0)
        first.cancel()

        await second

        assert first.cancelled()
        assert [p["token"] for p in query.pages] == [0]
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_cancel_discards_late_response(self, make_context):
        recorder = Recorder(self.respond)
        query = jobs_hooks(make_context(recorder)).infinite_query(page_size=2)

        task = asyncio.ensure_future(query.fetch_next_page())
        await asyncio.sleep(0)
        query.cancel()
        await task

        assert query.pages == []

    @pytest.mark.asyncio
    async def test_refetch_starts_over(self, make_context):
        recorder = Recorder(self.respond)
        query = jobs_hooks(make_context(recorder)).infinite_query(page_size=2)

        await query.fetch_next_page()
        await query.fetch_next_page()
        await query.refetch()

        assert [p["token"] for p in query.pages] == [0]

    @pytest.mark.asyncio
    async def test_mutation_between_pages_reloads_list(self, make_context):
        """A create that shifts offsets must not duplicate or hide rows"""
        items = [{"id": f"s{i}"} for i in range(5)]

        def respond(request):
            if request.method == "POST":
                created = {"id": "a-new", **json.loads(request.content)}
                items.insert(0, created)
                return envelope(created, status=201)
            return page_of(items, request)

        recorder = Recorder(respond)
        skills = skills_hooks(make_context(recorder))
        query = skills.infinite_query(page_size=2)

        await query.fetch_next_page()
        await skills.create({"name": "a-new"})
        assert query.is_stale

        await query.fetch_next_page()

        ids = [item["id"] for item in query.items]
        assert ids == ["a-new", "s0", "s1", "s2"]
        assert len(ids) == len(set(ids))
        assert [r.url.params["skip"] for r in recorder.requests if r.method == "GET"] == ["0", "0", "2"]
        assert not query.is_stale

    @pytest.mark.asyncio
    async def test_reload_drops_pages_past_shrunken_list(self, make_context):
        items = [{"id": f"s{i}"} for i in range(4)]

        def respond(request):
            if request.method == "DELETE":
                del items[:3]
                return envelope(None)
            return page_of(items, request)

        recorder = Recorder(respond)
        skills = skills_hooks(make_context(recorder))
        query = skills.infinite_query(page_size=2)

        await query.fetch_next_page()
        await query.fetch_next_page()
        await skills.delete("s0")

        await query.fetch_next_page()

        assert [p["token"] for p in query.pages] == [0]
        assert [item["id"] for item in query.items] == ["s3"]
        assert not query.has_next_page


class TestAgainstApp:
    """Hooks talking to the real application over ASGI."""

    @pytest.mark.asyncio
    async def test_skill_lifecycle(self, app_context):
        context = app_context()
        skills = skills_hooks(context)

        created = await skills.create({"name": "Go", "category": "Programming Language"})
        listed = await skills.query()

        with pytest.raises(ApiError) as exc_info:
            await skills.create({"name": "go"})

        await skills.delete(created["id"])
        after_delete = await skills.query()

        assert listed.data == [created]
        assert exc_info.value.status == 400
        assert context.store.state.notifications[0].level == "error"
        assert after_delete.data == []

    @pytest.mark.asyncio
    async def test_infinite_list_sees_created_skill(self, app_context):
        skills = skills_hooks(app_context())
        for name in ("b", "c", "d"):
            await skills.create({"name": name})

        query = skills.infinite_query(page_size=2)
        await query.fetch_next_page()
        await skills.create({"name": "a"})
        await query.fetch_next_page()

        assert [s["name"] for s in query.items] == ["a", "b", "c", "d"]

    @pytest.mark.asyncio
    async def test_profile_flow(self, app_context):
        profile = profile_hooks(app_context(role="job_seeker", subject=JOB_SEEKER_ID))

        missing = await profile.query()
        await profile.create({"full_name": "Ada Lovelace"})
        await profile.update({"headline": "Engineer"})
        uploaded = await profile.upload_resume("cv.pdf", b"%PDF-1.4 data", "application/pdf")
        current = await profile.query()

        assert missing.error.status == 404
        assert uploaded["has_resume"] is True
        assert current.data["headline"] == "Engineer"
        assert current.data["has_resume"] is True
