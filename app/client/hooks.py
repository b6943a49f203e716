"""
Per-resource data hooks.

A hook object wraps the HTTP calls for one resource and owns its cache keys:

- `query(**params)` serves the list from the cache while it is fresh;
- `infinite_query(page_size)` loads the list page by page;
- `create` / `update` / `delete` invalidate every cached family the mutation
  affects on success, and push an error notification on failure without
  touching the cache.

Form payloads are validated against the API's own pydantic schemas before any
request is made.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.client.cache import QueryCache, QueryKey, make_key
from app.client.config import ClientSettings
from app.client.http import ApiClient, ApiError
from app.client.invalidation import affected_families
from app.client.store import Store
from app.schemas.job import JobCreate, JobUpdate
from app.schemas.job_seeker import JobSeekerCreate, JobSeekerUpdate
from app.schemas.skill import SkillCreate, SkillUpdate

logger = logging.getLogger(__name__)


class PreconditionFailed(Exception):
    """A hook was asked to fetch before its preconditions (e.g. sign-in) hold."""
    pass


class FormValidationError(Exception):
    """Client-side validation failed; `errors` maps field name to message."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("Invalid form data")
        self.errors = errors


@dataclass
class ClientContext:
    """Everything a hook needs, passed explicitly."""
    api: ApiClient
    cache: QueryCache
    store: Store
    settings: ClientSettings

    @classmethod
    def create(
        cls,
        settings: Optional[ClientSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "ClientContext":
        settings = settings or ClientSettings()
        store = Store(notification_ttl=settings.notification_ttl)
        api = ApiClient(
            settings.base_url,
            token_provider=lambda: store.token,
            timeout=settings.timeout,
            transport=transport,
        )
        return cls(api=api, cache=QueryCache(stale_time=settings.stale_time), store=store, settings=settings)

    async def aclose(self) -> None:
        await self.api.aclose()


@dataclass
class QueryResult:
    data: Any = None
    error: Optional[ApiError] = None
    is_loading: bool = False
    is_fetching: bool = False
    is_stale: bool = True


def validate_form(schema: Type[BaseModel], fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate `fields` with `schema` and return the JSON payload to send.

    Only fields the caller supplied are sent, so partial updates stay partial.

    Raises:
        FormValidationError: With one message per offending field
    """
    try:
        model = schema.model_validate(fields)
    except PydanticValidationError as exc:
        errors: Dict[str, str] = {}
        for e in exc.errors():
            name = ".".join(str(loc) for loc in e["loc"]) or "__root__"
            errors.setdefault(name, e["msg"])
        raise FormValidationError(errors)
    return model.model_dump(mode="json", exclude_unset=True)


class ResourceHooks:
    """
    Hooks for a REST resource exposed at /{resource}/.

    Args:
        context: Shared client context
        resource: Resource name; also the cache family and URL segment
        create_schema / update_schema: Form validation schemas
        requires_auth: Queries need a signed-in user (mutations always do)
    """

    def __init__(
        self,
        context: ClientContext,
        resource: str,
        *,
        create_schema: Optional[Type[BaseModel]] = None,
        update_schema: Optional[Type[BaseModel]] = None,
        requires_auth: bool = False
    ):
        self.context = context
        self.resource = resource
        self.create_schema = create_schema
        self.update_schema = update_schema
        self.requires_auth = requires_auth

    @property
    def path(self) -> str:
        return f"/{self.resource}/"

    def item_path(self, id: Any) -> str:
        return f"/{self.resource}/{id}"

    def query_key(self, **params) -> QueryKey:
        return make_key(self.resource, "list", params)

    def check_preconditions(self, require_auth: bool = False) -> None:
        if (require_auth or self.requires_auth) and self.context.store.state.auth is None:
            raise PreconditionFailed(f"Sign in required to access {self.resource}")

    def peek(self, **params) -> QueryResult:
        """Current cached state for a query, without fetching."""
        key = self.query_key(**params)
        entry = self.context.cache.get(key)
        fetching = self.context.cache.is_fetching(key)
        return QueryResult(
            data=entry.data if entry else None,
            is_loading=entry is None and fetching,
            is_fetching=fetching,
            is_stale=self.context.cache.is_stale(key),
        )

    async def query(self, **params) -> QueryResult:
        """
        Fetch the list (or serve it from cache while fresh).

        Request errors are returned in `error`; previously cached data, if
        any, is still returned alongside.
        """
        self.check_preconditions()
        key = self.query_key(**params)
        cache = self.context.cache

        try:
            data = await cache.fetch(key, lambda: self.context.api.get(self.path, params=params or None))
        except ApiError as exc:
            logger.warning(f"Query {key} failed: {exc}")
            entry = cache.get(key)
            return QueryResult(data=entry.data if entry else None, error=exc, is_stale=True)

        return QueryResult(data=data, is_stale=cache.is_stale(key))

    def infinite_query(self, page_size: Optional[int] = None, **params) -> "InfiniteQuery":
        self.check_preconditions()
        return InfiniteQuery(self, page_size or self.context.settings.default_page_size, params)

    async def create(self, fields: Dict[str, Any]) -> Any:
        payload = validate_form(self.create_schema, fields) if self.create_schema else fields
        return await self._mutate("POST", self.path, payload)

    async def update(self, id: Any, fields: Dict[str, Any]) -> Any:
        payload = validate_form(self.update_schema, fields) if self.update_schema else fields
        return await self._mutate("PUT", self.item_path(id), payload)

    async def delete(self, id: Any) -> Any:
        return await self._mutate("DELETE", self.item_path(id))

    async def _mutate(self, method: str, path: str, payload: Any = None, files: Optional[Dict[str, Any]] = None) -> Any:
        self.check_preconditions(require_auth=True)

        try:
            data = await self.context.api.request(method, path, json=payload, files=files)
        except ApiError as exc:
            # Failed mutations leave the cache alone; nothing to roll back
            self.context.store.notify(exc.message, level="error")
            raise

        for family in affected_families(self.resource):
            self.context.cache.invalidate(family)
        return data


class InfiniteQuery:
    """
    Incrementally loaded list.

    Pages are stored in the query cache under (resource, "infinite", params)
    as [{"token": skip, "items": [...]}, ...]. The page token is the `skip`
    offset of the page.

    Once the entry goes stale (a mutation invalidated the family, or
    stale_time passed), the next fetch reloads the pages already shown from
    offset 0 before advancing, since the old offsets no longer line up with
    the server's list.
    """

    def __init__(self, hooks: ResourceHooks, page_size: int, params: Dict[str, Any]):
        self.hooks = hooks
        self.page_size = page_size
        self.params = params
        self.key = make_key(hooks.resource, "infinite", dict(params, limit=page_size))
        self._pending: Optional[asyncio.Future] = None
        self._cancelled = False

    @property
    def pages(self) -> List[Dict[str, Any]]:
        entry = self.hooks.context.cache.get(self.key)
        return list(entry.data) if entry else []

    @property
    def items(self) -> List[Any]:
        return [item for page in self.pages for item in page["items"]]

    @property
    def next_page_token(self) -> int:
        pages = self.pages
        if not pages:
            return 0
        return pages[-1]["token"] + self.page_size

    @property
    def has_next_page(self) -> bool:
        pages = self.pages
        return not pages or len(pages[-1]["items"]) >= self.page_size

    @property
    def is_fetching_next_page(self) -> bool:
        return self._pending is not None

    @property
    def is_stale(self) -> bool:
        return self.hooks.context.cache.is_stale(self.key)

    async def fetch_next_page(self) -> List[Dict[str, Any]]:
        """
        Load the page after the last loaded one, reloading stale pages first.

        While a page request is in flight, further calls wait for it instead
        of requesting anything themselves, so no page token is ever requested
        twice concurrently. Cancelling a waiting caller leaves the request
        running for the others.
        """
        if self._pending is None:
            if not (self.pages and self.is_stale) and not self.has_next_page:
                return self.pages
            self._pending = asyncio.ensure_future(self._advance())
            self._pending.add_done_callback(self._settle)

        await asyncio.shield(self._pending)
        return self.pages

    async def refetch(self) -> List[Dict[str, Any]]:
        """Drop loaded pages and load the first page again."""
        if self._pending is not None:
            await asyncio.shield(self._pending)
        self.hooks.context.cache.remove(self.key)
        return await self.fetch_next_page()

    def cancel(self) -> None:
        """Teardown: responses that arrive afterwards are discarded."""
        self._cancelled = True

    def _settle(self, task: asyncio.Future) -> None:
        self._pending = None
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Page fetch for {self.key} failed: {task.exception()!r}")

    async def _advance(self) -> None:
        if self.pages and self.is_stale:
            await self._reload([p["token"] for p in self.pages])
            if self._cancelled:
                return

        if self.has_next_page:
            await self._load(self.next_page_token)

    async def _request(self, token: int) -> List[Any]:
        params = dict(self.params, skip=token, limit=self.page_size)
        return await self.hooks.context.api.get(self.hooks.path, params=params)

    async def _reload(self, tokens: List[int]) -> None:
        cache = self.hooks.context.cache
        generation = cache.generation(self.hooks.resource)

        pages = []
        for token in tokens:
            items = await self._request(token)
            if self._cancelled:
                logger.debug(f"Discarding reload of {self.key}: query cancelled")
                return
            pages.append({"token": token, "items": items})
            # The list shrank; later pages no longer exist
            if len(items) < self.page_size:
                break

        logger.debug(f"Reloaded {len(pages)} pages for {self.key}")
        cache.set(self.key, pages, generation=generation)

    async def _load(self, token: int) -> None:
        cache = self.hooks.context.cache
        generation = cache.generation(self.hooks.resource)
        items = await self._request(token)

        if self._cancelled:
            logger.debug(f"Discarding page {token} for {self.key}: query cancelled")
            return

        pages = [p for p in self.pages if p["token"] != token]
        pages.append({"token": token, "items": items})
        pages.sort(key=lambda p: p["token"])
        # An invalidation while the page was in flight stores the list as stale
        cache.set(self.key, pages, generation=generation)


class ProfileHooks(ResourceHooks):
    """
    The signed-in job seeker's own profile at /jobseekers/me.

    A single record rather than a list, plus photo and resume uploads.
    """

    def __init__(self, context: ClientContext):
        super().__init__(
            context,
            "jobseekers",
            create_schema=JobSeekerCreate,
            update_schema=JobSeekerUpdate,
            requires_auth=True,
        )

    def query_key(self, **params) -> QueryKey:
        return make_key(self.resource, "me", params)

    async def query(self, **params) -> QueryResult:
        self.check_preconditions()
        key = self.query_key()
        try:
            data = await self.context.cache.fetch(key, lambda: self.context.api.get(self.item_path("me")))
        except ApiError as exc:
            entry = self.context.cache.get(key)
            return QueryResult(data=entry.data if entry else None, error=exc, is_stale=True)
        return QueryResult(data=data, is_stale=self.context.cache.is_stale(key))

    async def update(self, fields: Dict[str, Any]) -> Any:
        payload = validate_form(self.update_schema, fields)
        return await self._mutate("PUT", self.item_path("me"), payload)

    async def delete(self) -> Any:
        return await self._mutate("DELETE", self.item_path("me"))

    async def upload_photo(self, filename: str, content: bytes, content_type: str) -> Any:
        return await self._mutate("POST", self.item_path("me/photo"), files={"file": (filename, content, content_type)})

    async def upload_resume(self, filename: str, content: bytes, content_type: str) -> Any:
        return await self._mutate("POST", self.item_path("me/resume"), files={"file": (filename, content, content_type)})


def skills_hooks(context: ClientContext) -> ResourceHooks:
    return ResourceHooks(context, "skills", create_schema=SkillCreate, update_schema=SkillUpdate)


def jobs_hooks(context: ClientContext) -> ResourceHooks:
    return ResourceHooks(context, "jobs", create_schema=JobCreate, update_schema=JobUpdate)


def profile_hooks(context: ClientContext) -> ProfileHooks:
    return ProfileHooks(context)
