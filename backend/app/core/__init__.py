"""Core Layer - error taxonomy, error registry, request context and pipeline driver.

Invariants:
    - No module in core/ imports from api/, services/, infrastructure/ or db/
    - Process-wide state here (error registry) is built once and never mutated
"""
