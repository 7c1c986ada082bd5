"""
NegotiateAI Backend - Application Package Initializer
=====================================================

What:  Marks the `negotiateai` directory as a Python package.
Who:   Used by uvicorn (`negotiateai.main:app`), Alembic and pytest.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Pipelines (gateway + normalizer)  │  ← Prompting, parsing, fallbacks
    ├─────────────────────────────────────┤
    │     Services (records, users)       │  ← Orchestration, ownership rules
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Pipelines never touch the database; services never talk to the model
    provider directly. Each layer can be tested with the layer below mocked.
"""

__version__ = "1.0.0"
