# Services package init
"""
Spacetime API — Services Layer
================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
Why:   Routes handle HTTP; services handle business rules.

Service Inventory:
    - MemoryService: ownership/visibility checks and memory CRUD
"""
