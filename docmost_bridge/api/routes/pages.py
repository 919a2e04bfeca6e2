"""Page Routes — create/update, metadata, history, breadcrumbs, comments, attachments.

Invariants:
    - POST /pages creates, PUT /pages updates (the gateway invalidates caches)
    - Attachments are returned as raw bytes with the remote content type
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from docmost_bridge.api.dependencies import get_gateway, require_shim_key
from docmost_bridge.schemas.docmost import (
    CreatePageRequest, PagedPageRequest, PageRequest, UpdatePageRequest,
)
from docmost_bridge.services.api_gateway import DocmostGateway

logger = logging.getLogger(__name__)
router = APIRouter(tags=["pages"], dependencies=[Depends(require_shim_key)])


@router.post("/pages")
async def create_page(
    body: CreatePageRequest, gateway: DocmostGateway = Depends(get_gateway),
):
    return await gateway.create_page(
        body.space_id, body.title, body.content, body.parent_id,
    )


@router.put("/pages")
async def update_page(
    body: UpdatePageRequest, gateway: DocmostGateway = Depends(get_gateway),
):
    return await gateway.update_page(body.page_id, body.title, body.content)


@router.get("/pages/{page_id}")
async def page_metadata(page_id: str, gateway: DocmostGateway = Depends(get_gateway)):
    return await gateway.get_page_metadata(page_id)


@router.post("/pages/info")
async def page_metadata_by_body(
    body: PageRequest, gateway: DocmostGateway = Depends(get_gateway),
):
    return await gateway.get_page_metadata(body.page_id)


@router.post("/pages/history")
async def page_history(
    body: PagedPageRequest, gateway: DocmostGateway = Depends(get_gateway),
):
    return await gateway.get_page_history(body.page_id, body.page, body.limit)


@router.post("/pages/breadcrumbs")
async def page_breadcrumbs(
    body: PageRequest, gateway: DocmostGateway = Depends(get_gateway),
):
    return await gateway.get_page_breadcrumbs(body.page_id)


@router.post("/comments")
async def comments(
    body: PagedPageRequest, gateway: DocmostGateway = Depends(get_gateway),
):
    return await gateway.get_comments(body.page_id, body.page, body.limit)


@router.get("/attachments/{attachment_id}")
@router.get("/attachments/{attachment_id}/{file_name}")
async def attachment(
    attachment_id: str,
    file_name: str | None = None,
    gateway: DocmostGateway = Depends(get_gateway),
):
    file = await gateway.get_attachment(attachment_id, file_name)
    return Response(content=file.content, media_type=file.content_type)
