# Middleware package init
"""
Treble API — Middleware Package
================================

Middleware Chain (request direction):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → [Errors] → Route Handler

    Request ID runs first so the access log line carries the ID.
    CORS answers preflight OPTIONS requests itself; they never reach a
    handler. Errors sits innermost so unexpected 500s still pass back
    through CORS and pick up X-Request-ID.
"""
