"""
identity_service.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories for accounts and roles.
"""

# Package marker.
