"""Health Probes — liveness and Docmost connectivity endpoints.

Invariants:
    - GET /health always returns 200 if the process is up (liveness, no key)
    - GET /health/detailed reports reachability + authentication, never 500s
"""

import logging

from fastapi import APIRouter, Depends, status

from docmost_bridge.api.dependencies import get_gateway
from docmost_bridge.services.api_gateway import DocmostGateway

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("", status_code=status.HTTP_200_OK)
async def health():
    """Basic liveness probe."""
    return {"ok": True}


@router.get("/detailed")
async def health_detailed(gateway: DocmostGateway = Depends(get_gateway)):
    """Logs in if needed and lists spaces; failures come back as ok=false."""
    return await gateway.health_check()
