"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter with tags
    - Routes never contain business logic (delegate to DocmostGateway)
    - Everything except the health probes sits behind require_shim_key

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
