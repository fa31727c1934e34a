# Middleware package init
"""
Parcel Server — Middleware Package
===================================

Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first: every later log line can carry the correlation ID
    2. Logging: route template, status, duration and the authenticated caller
       (read from request.state.identity, set by the credential check)

Authorization is not middleware: it is per-route (see parcel_server.auth),
because each endpoint belongs to a different sensitivity class.
"""
