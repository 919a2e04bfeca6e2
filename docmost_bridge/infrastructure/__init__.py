"""Infrastructure Layer — remote session, resilient execution and observability.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All remote calls wrapped with retry/timeout/error mapping

Design Decisions:
    - Resilient wrappers over the raw httpx client
"""
