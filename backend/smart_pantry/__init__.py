"""
Smart Pantry Backend: Application Package
==========================================

What: Food-inventory tracking API. Users register, sign in, record food items
      with expiry dates, and ask Google Gemini for recipes that use them up.
Who:  Imported by uvicorn (smart_pantry.main:app), Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │        Routes (controllers)         │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │        Services (usecases)          │  ← Business rules, Gemini client
    ├─────────────────────────────────────┤
    │          Repositories               │  ← One query per method
    ├─────────────────────────────────────┤
    │   Models & Schemas (ORM/Pydantic)   │
    ├─────────────────────────────────────┤
    │     Database (async SQLAlchemy)     │
    └─────────────────────────────────────┘

    Routes never touch the session directly; they hand it to a service,
    which hands it to a repository.
"""

__version__ = "1.0.0"
