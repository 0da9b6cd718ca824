"""
Spacetime API — Application Package
=====================================

Layered architecture:

    ┌─────────────────────────────────────┐
    │      Routes + Security (HTTP)       │  ← status codes, bearer tokens
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← ownership, visibility, excerpts
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
