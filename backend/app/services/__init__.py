"""Services - business rules composed over repository and publisher protocols.

Invariants:
    - Domain failures raised as typed ApiErrors so the registry renders them uniformly
"""
