"""
Tuiter Backend — Application Package
======================================

Layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, legacy status codes
    ├─────────────────────────────────────┤
    │   Services (annotation, accounts)   │  ← Business rules, fan-out/merge
    ├─────────────────────────────────────┤
    │        Stores (Record Store)        │  ← One session per call
    ├─────────────────────────────────────┤
    │   Models & Schemas / Database       │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
