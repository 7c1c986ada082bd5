"""
NegotiateAI Backend - Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    The request id is assigned first so the access log line and every
    log line emitted while handling the request carry the same id.
"""
