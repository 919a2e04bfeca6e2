"""Pydantic Schemas — request validation for the bridge's HTTP routes.

Invariants:
    - Schemas validate at system boundary (caller input)
    - Remote responses are passed through untouched, never re-modelled
"""
