"""Controllers - functions from (parsed request, service, context) to Envelope.

Invariants:
    - No business rules here: call the service, shape the result with a transformer
    - Errors are not caught; they reach the registered error handlers

Design Decisions:
    - Plain functions over controller classes: composed with a service, not inherited
"""
