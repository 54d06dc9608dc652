"""
ChurchApp Backend — Application Package
=========================================

Layered layout:

    ┌─────────────────────────────────────┐
    │  routes/         HTTP only          │  status codes, request parsing
    ├─────────────────────────────────────┤
    │  dependencies    auth / gates       │  principal, roles, permissions
    ├─────────────────────────────────────┤
    │  services/       business rules     │  tenancy, limits, invariants
    ├─────────────────────────────────────┤
    │  models/ schemas/                   │  SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │  database        async sessions     │  one transaction per request
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
