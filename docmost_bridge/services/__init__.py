"""Services Layer — the Docmost gateway facade.

Invariants:
    - Services compose core and infrastructure; they never import from api/

Design Decisions:
    - One facade object over session, executor and cache; retry and caching
      stay in their own modules
"""
