"""Docmost Gateway — the facade of domain operations callers invoke.

Invariants:
    - Read paths (spaces, search, all-pages) consult the ResponseCache before the executor
    - create_page invalidates spaces + search; update_page invalidates search only
    - all-pages is never invalidated by writes — it expires by TTL (accepted staleness)
    - String content is wrapped into a TipTap document; dict content passes through
    - get_all_pages tolerates per-space failures (logged, skipped)
    - health_check() and debug_session() never raise

Design Decisions:
    - Explicit service objects (session, executor, cache) injected at construction:
      the FastAPI lifespan builds one gateway per process, tests build their own
    - Sequential fan-out over spaces: bounded load on the remote, stable page order
"""

import logging
import time
from typing import Any

import httpx

from docmost_bridge.config import Settings
from docmost_bridge.core.content_format import (
    augment_pages, build_aggregate, normalize_content, unwrap_items,
)
from docmost_bridge.core.domain_types import Attachment, CacheTier, RemoteCall
from docmost_bridge.core.errors import PartialAggregationFailure
from docmost_bridge.core.response_cache import ResponseCache, build_tier_configs
from docmost_bridge.infrastructure.resilient_executor import ResilientExecutor
from docmost_bridge.infrastructure.session_manager import SessionManager

logger = logging.getLogger(__name__)

DEFAULT_ATTACHMENT_NAME = "diagram.drawio.svg"


class DocmostGateway:
    """Composes session, executor and cache into the bridge's public operations."""

    def __init__(
        self,
        session: SessionManager,
        executor: ResilientExecutor,
        cache: ResponseCache,
    ):
        self.session = session
        self.executor = executor
        self.cache = cache

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "DocmostGateway":
        session = SessionManager(
            settings.docmost_base_url,
            settings.docmost_email,
            settings.docmost_password,
            session_ttl_seconds=settings.session_ttl_seconds,
            debounce_seconds=settings.login_debounce_seconds,
            timeout_seconds=settings.request_timeout_seconds,
            transport=transport,
            policy=settings.retry_policy,
        )
        cache = ResponseCache(
            build_tier_configs(
                spaces_ttl=settings.cache_spaces_ttl,
                search_ttl=settings.cache_search_ttl,
                max_entries=settings.cache_max_entries,
                all_pages_ttl=settings.cache_all_pages_ttl,
            ),
            max_size=settings.cache_max_entries,
        )
        return cls(session, ResilientExecutor(session, settings.retry_policy), cache)

    async def boot(self) -> str | None:
        """Initial forced login. AuthenticationFailure here is fatal to startup."""
        return await self.session.login(force=True)

    async def aclose(self) -> None:
        await self.session.aclose()

    # ── Spaces ──

    async def list_spaces(self) -> Any:
        cached = self.cache.get_spaces()
        if cached is not None:
            return cached
        result = await self.executor.execute(RemoteCall.post("/api/spaces"))
        self.cache.set_spaces(result)
        return result

    async def get_space_pages(self, space_id: str) -> Any:
        return await self.executor.execute(
            RemoteCall.post("/api/pages/sidebar-pages", {"spaceId": space_id}),
        )

    # ── Search ──

    async def search_docs(
        self,
        query: str,
        space_id: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> Any:
        """Search, cached per (query, space).

        page and limit are sent to Docmost on a miss but are not part of the
        cache key: within the search TTL, any page of a query is answered
        with whichever page was fetched first.
        """
        cached = self.cache.get_search(query, space_id)
        if cached is not None:
            return cached
        body: dict[str, Any] = {"query": query, "page": page, "limit": limit}
        if space_id:
            body["spaceId"] = space_id
        result = await self.executor.execute(RemoteCall.post("/api/search", body))
        self.cache.set_search(query, space_id, result)
        return result

    # ── Pages ──

    async def create_page(
        self,
        space_id: str,
        title: str,
        content: Any = "",
        parent_id: str | None = None,
    ) -> Any:
        self.cache.invalidate(CacheTier.SPACES)
        self.cache.invalidate(CacheTier.SEARCH)

        body: dict[str, Any] = {
            "spaceId": space_id,
            "title": title,
            "content": normalize_content(content),
        }
        if parent_id:
            body["parentId"] = parent_id
        return await self.executor.execute(RemoteCall.post("/api/pages/create", body))

    async def update_page(
        self,
        page_id: str,
        title: str | None = None,
        content: Any = None,
    ) -> Any:
        self.cache.invalidate(CacheTier.SEARCH)

        body: dict[str, Any] = {"pageId": page_id}
        if title is not None:
            body["title"] = title
        if content is not None:
            body["content"] = normalize_content(content)
        return await self.executor.execute(RemoteCall.post("/api/pages/update", body))

    async def get_page_metadata(self, page_id: str) -> Any:
        return await self.executor.execute(
            RemoteCall.post("/api/pages/info", {"pageId": page_id}),
        )

    async def get_page_history(self, page_id: str, page: int = 1, limit: int = 20) -> Any:
        return await self.executor.execute(
            RemoteCall.post(
                "/api/pages/history", {"pageId": page_id, "page": page, "limit": limit},
            ),
        )

    async def get_page_breadcrumbs(self, page_id: str) -> Any:
        return await self.executor.execute(
            RemoteCall.post("/api/pages/breadcrumbs", {"pageId": page_id}),
        )

    async def get_comments(self, page_id: str, page: int = 1, limit: int = 20) -> Any:
        return await self.executor.execute(
            RemoteCall.post(
                "/api/comments/", {"pageId": page_id, "page": page, "limit": limit},
            ),
        )

    async def get_attachment(
        self, attachment_id: str, file_name: str | None = None,
    ) -> Attachment:
        name = file_name or DEFAULT_ATTACHMENT_NAME
        resp = await self.executor.execute(
            RemoteCall.get(f"/api/files/{attachment_id}/{name}", raw=True),
        )
        return Attachment(
            file_name=name,
            content_type=resp.headers.get("content-type", "application/octet-stream"),
            content=resp.content,
        )

    # ── Aggregate ──

    async def get_all_pages(self) -> dict:
        cached = self.cache.get_all_pages()
        if cached is not None:
            return cached

        spaces = [s for s in unwrap_items(await self.list_spaces()) if isinstance(s, dict)]
        all_pages: list[dict] = []
        for space in spaces:
            try:
                pages = [
                    p for p in unwrap_items(await self.get_space_pages(space["id"]))
                    if isinstance(p, dict)
                ]
            except Exception as e:
                failure = PartialAggregationFailure(
                    str(space.get("id")), str(space.get("name")), e,
                )
                logger.warning(
                    failure.message,
                    extra={"space_id": failure.space_id, "error_code": failure.code},
                )
                continue
            all_pages.extend(augment_pages(space, pages))

        result = build_aggregate(all_pages)
        self.cache.set_all_pages(result)
        return result

    # ── Diagnostics ──

    async def health_check(self) -> dict:
        """Connectivity + authentication probe via list_spaces. Never raises."""
        timestamp = int(time.time() * 1000)
        last_login_at = int(self.session.state.last_auth_at * 1000)
        try:
            await self.list_spaces()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return {
                "ok": False,
                "docmostReachable": False,
                "authenticated": False,
                "lastLoginAt": last_login_at,
                "sessionValid": False,
                "timestamp": timestamp,
            }
        return {
            "ok": True,
            "docmostReachable": True,
            "authenticated": True,
            "lastLoginAt": int(self.session.state.last_auth_at * 1000),
            "sessionValid": True,
            "timestamp": timestamp,
        }

    async def debug_session(self) -> dict:
        """Session cookies and cache stats. Never raises."""
        try:
            info = self.session.describe()
            info["cacheStats"] = self.cache.stats().to_dict()
            return info
        except Exception as e:
            logger.error(f"Debug session failed: {e}", exc_info=True)
            return {"baseURL": self.session.base_url, "error": str(e)}
