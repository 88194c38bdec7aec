"""Pydantic Schemas - request validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (request bodies)
"""
