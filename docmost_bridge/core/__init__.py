"""Core Layer — pure logic for errors, value types, content shaping and caching.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - No network IO in core/

Design Decisions:
    - Functional core separated from imperative shell
"""
