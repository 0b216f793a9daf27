"""Alembic migration scripts for the record store tables."""
