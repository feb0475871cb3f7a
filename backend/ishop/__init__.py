"""
iShop Payments Backend — Application Package Initializer
=========================================================

What: Marks the `ishop` directory as a Python package.
Who:  Imported by uvicorn (`ishop.main:app`), Alembic, and pytest.

Architecture Note:
    The backend is split into layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (Payment Business)     │  ← Gateway, signatures, orchestration
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes translate HTTP to service calls; services raise typed errors
    from `ishop.exceptions`; global handlers in `ishop.main` turn those
    errors into responses.
"""

__version__ = "1.0.0"
