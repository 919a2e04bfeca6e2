"""Route Dependencies — gateway lookup and shim-key guard.

Invariants:
    - The gateway is built once in the lifespan and read from app.state
    - When SHIM_API_KEY is unset, every caller is allowed through
"""

from fastapi import Depends, Header, HTTPException, Request, status

from docmost_bridge.config import Settings, get_settings
from docmost_bridge.services.api_gateway import DocmostGateway


def get_gateway(request: Request) -> DocmostGateway:
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise RuntimeError("Gateway not initialized")
    return gateway


async def require_shim_key(
    x_shim_key: str | None = Header(None, alias="X-SHIM-KEY"),
    settings: Settings = Depends(get_settings),
):
    expected = settings.shim_api_key
    if not expected:
        return
    if x_shim_key != expected:
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized (missing/invalid X-SHIM-KEY)",
        )
