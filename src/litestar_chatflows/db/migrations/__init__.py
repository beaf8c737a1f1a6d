"""Alembic migrations for the chatflow tables."""
