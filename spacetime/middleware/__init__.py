# Middleware package init
"""
Spacetime API — Middleware Package
====================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: correlation ID for logs, error bodies and the response header
    2. Logging: one access line per request, tagged with that ID
    3. CORS: FastAPI's CORSMiddleware (answers preflight requests)
"""
