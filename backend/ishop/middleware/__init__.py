# Middleware package init
"""
iShop Payments Backend — Middleware Package
=============================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    Request ID runs first so the access log line and every log written by
    the handler share the same ID.
"""
