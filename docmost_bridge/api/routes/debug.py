"""Debug Route — cookies held by the bridge plus cache statistics."""

from fastapi import APIRouter, Depends

from docmost_bridge.api.dependencies import get_gateway, require_shim_key
from docmost_bridge.services.api_gateway import DocmostGateway

router = APIRouter(prefix="/debug", tags=["debug"], dependencies=[Depends(require_shim_key)])


@router.get("/session")
async def debug_session(gateway: DocmostGateway = Depends(get_gateway)):
    return await gateway.debug_session()
