"""Docmost Bridge — session-resilient, cached access to a Docmost instance.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
