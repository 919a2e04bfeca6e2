"""Content Shaping — pure functions that normalize request bodies and remote responses.

Invariants:
    - Pure functions: no IO, no async
    - Plain-text content becomes a single-paragraph TipTap document; dicts pass through
    - Remote list responses accepted either as a bare list or a {"data": {"items": [...]}} envelope
    - Space slug: provided slug wins, else lower-cased name with whitespace runs → "-"
"""

import re
from datetime import datetime, timezone
from typing import Any

_WHITESPACE = re.compile(r"\s+")

SEARCH_MAX_LIMIT = 100


def normalize_content(content: Any) -> Any:
    """Wrap plain text into the minimal rich-document structure the editor expects."""
    if isinstance(content, str):
        return {
            "type": "doc",
            "content": [
                {
                    "type": "paragraph",
                    "content": [{"type": "text", "text": content}],
                },
            ],
        }
    return content


def unwrap_items(response: Any) -> list:
    """Extract the item list from either response shape."""
    if isinstance(response, list):
        return response
    if isinstance(response, dict):
        data = response.get("data")
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            items = data.get("items")
            if isinstance(items, list):
                return items
    return []


def space_slug(space: dict) -> str:
    slug = space.get("slug")
    if slug:
        return slug
    return _WHITESPACE.sub("-", str(space.get("name", "")).lower())


def augment_pages(space: dict, pages: list[dict]) -> list[dict]:
    """Copy each page with its owning space's name and slug attached."""
    name = space.get("name")
    slug = space_slug(space)
    return [{**page, "spaceName": name, "spaceSlug": slug} for page in pages]


def build_aggregate(pages: list[dict], now: datetime | None = None) -> dict:
    built_at = now or datetime.now(timezone.utc)
    return {
        "pages": pages,
        "totalCount": len(pages),
        "lastUpdated": built_at.isoformat(),
    }


def clamp_pagination(page: Any, limit: Any) -> tuple[int, int]:
    """Coerce page >= 1 and 1 <= limit <= 100; unparseable values fall back to defaults."""
    try:
        valid_page = max(1, int(page))
    except (TypeError, ValueError):
        valid_page = 1
    try:
        valid_limit = min(SEARCH_MAX_LIMIT, max(1, int(limit)))
    except (TypeError, ValueError):
        valid_limit = 20
    return valid_page, valid_limit


def pagination_meta(count: int, page: int, limit: int) -> dict:
    """Pagination block for a single page of search results."""
    return {
        "page": page,
        "limit": limit,
        "total": count,
        "totalPages": -(-count // limit),
        "hasNext": count == limit,
        "hasPrev": page > 1,
    }
