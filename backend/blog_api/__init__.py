"""
Blog API Backend — Application Package Initializer
====================================================

What: Marks the `blog_api` directory as a Python package.
Who:  Imported by uvicorn, pytest, and the `python -m blog_api` entry point.

Architecture Note:
    The backend is split into thin layers:

    ┌─────────────────────────────────────┐
    │   Server (uvicorn lifecycle)        │  ← run_server / close_server
    ├─────────────────────────────────────┤
    │   Routes (Post Resource Handler)    │  ← HTTP verbs → store calls
    ├─────────────────────────────────────┤
    │   Services (Post Store)             │  ← persistence operations
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database (Persistence)            │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes handle status codes and wire formats, the store owns every query,
    and the database module owns the engine and the session lifecycle.
"""

__version__ = "1.0.0"
