"""
Treble API — Application Package Initializer
=============================================

What: Marks the `treble_api` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is a thin layered service:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (Moderation, File types,  │  ← Validation, business rules
    │            Pattern store)           │
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The moderation filter and the database handle are built once by
    create_app() and handed down explicitly; nothing below the routes
    reaches for module-level state.
"""

__version__ = "1.0.0"
