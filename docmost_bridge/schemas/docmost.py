"""Docmost Schemas — Pydantic request models for the route layer.

Invariants:
    - Identifiers (spaceId, pageId) are non-empty strings
    - search query is non-empty; page/limit are clamped by the route, not rejected
    - content accepts plain text or an already-structured TipTap document

Design Decisions:
    - camelCase aliases match the original shim's JSON; populate_by_name lets
      Python callers use snake_case
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SearchRequest(_CamelModel):
    query: str = Field(min_length=1)
    space_id: str | None = Field(None, alias="spaceId")
    page: int = 1
    limit: int = 20


class CreatePageRequest(_CamelModel):
    space_id: str = Field(min_length=1, alias="spaceId")
    title: str = Field(min_length=1)
    content: str | dict[str, Any] = ""
    parent_id: str | None = Field(None, alias="parentId")


class UpdatePageRequest(_CamelModel):
    page_id: str = Field(min_length=1, alias="pageId")
    title: str | None = None
    content: str | dict[str, Any] | None = None


class SpaceRequest(_CamelModel):
    space_id: str = Field(min_length=1, alias="spaceId")


class PageRequest(_CamelModel):
    page_id: str = Field(min_length=1, alias="pageId")


class PagedPageRequest(PageRequest):
    """pageId plus pagination, for history and comments."""
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)
