"""Adapters (infrastructure) for MARKETBASE.

Provide concrete implementations of the record store port (in-memory and
SQLAlchemy), ID generators, password hashing, the declarative schema file
loader, and related wiring (engines, metadata, migrations).

Dependency rule: may import `marketbase.domain` and `marketbase.interfaces`;
the domain must not import this package.
"""
