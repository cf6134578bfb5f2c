"""HTTP Middleware - request pipeline adapter, security headers, rate limiting.

Invariants:
    - Registration order lives in main.create_app, nowhere else
"""
