"""Pydantic Schemas - request validation for API endpoints.

Invariants:
    - Schemas validate at the system boundary (after the pipeline's sanitization)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
