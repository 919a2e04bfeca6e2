"""Space Routes — space listing, per-space pages and the all-pages aggregate."""

import logging

from fastapi import APIRouter, Depends

from docmost_bridge.api.dependencies import get_gateway, require_shim_key
from docmost_bridge.schemas.docmost import SpaceRequest
from docmost_bridge.services.api_gateway import DocmostGateway

logger = logging.getLogger(__name__)
router = APIRouter(tags=["spaces"], dependencies=[Depends(require_shim_key)])


@router.get("/spaces")
async def list_spaces(gateway: DocmostGateway = Depends(get_gateway)):
    return await gateway.list_spaces()


@router.get("/spaces/{space_id}/pages")
async def space_pages(space_id: str, gateway: DocmostGateway = Depends(get_gateway)):
    return await gateway.get_space_pages(space_id)


@router.post("/spaces/pages")
async def space_pages_by_body(
    body: SpaceRequest, gateway: DocmostGateway = Depends(get_gateway),
):
    return await gateway.get_space_pages(body.space_id)


@router.get("/all-pages")
async def all_pages(gateway: DocmostGateway = Depends(get_gateway)):
    """Every page of every space, tagged with spaceName/spaceSlug."""
    return await gateway.get_all_pages()
