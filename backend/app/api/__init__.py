"""API Layer - FastAPI routes, dependencies, middleware and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Every endpoint responds with the envelope shape

Design Decisions:
    - Thin routes delegate to controllers, controllers to services
"""
