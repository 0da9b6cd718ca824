# Routes package init
"""
Spacetime API — Routes Package
================================

Route Inventory:
    - memories.py:  GET    /memories        (list the caller's memories)
                    GET    /memories/{id}   (one memory)
                    POST   /memories        (create)
                    PUT    /memories/{id}   (full replacement)
                    DELETE /memories/{id}   (delete)
    - health.py:    GET    /health          (service health check)

Routes stay THIN: they extract input, call the service, and return its
result. Business rules live in services/.
"""
