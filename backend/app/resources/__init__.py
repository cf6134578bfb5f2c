"""Resource Transformers - pure mappings from domain objects and errors to envelopes.

Invariants:
    - Transformers never mutate their inputs
    - Output is JSON-ready (str ids, ISO-8601 timestamps)
"""
