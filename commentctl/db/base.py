"""Declarative base for commentctl ORM models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all commentctl ORM models. Exposes metadata for Alembic."""
