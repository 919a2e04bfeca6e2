"""Search Route — cached search with pagination metadata.

Invariants:
    - page clamped to >= 1, limit clamped to 1..100 before reaching the gateway
    - Response is {"data": [...], "pagination": {...}}
"""

import logging

from fastapi import APIRouter, Depends

from docmost_bridge.api.dependencies import get_gateway, require_shim_key
from docmost_bridge.core.content_format import (
    clamp_pagination, pagination_meta, unwrap_items,
)
from docmost_bridge.schemas.docmost import SearchRequest
from docmost_bridge.services.api_gateway import DocmostGateway

logger = logging.getLogger(__name__)
router = APIRouter(tags=["search"], dependencies=[Depends(require_shim_key)])


@router.post("/search")
async def search(body: SearchRequest, gateway: DocmostGateway = Depends(get_gateway)):
    page, limit = clamp_pagination(body.page, body.limit)
    data = await gateway.search_docs(body.query, body.space_id, page, limit)
    items = unwrap_items(data)
    return {"data": items, "pagination": pagination_meta(len(items), page, limit)}
