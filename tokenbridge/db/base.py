"""Declarative base for tokenbridge SQLAlchemy models."""

from sqlalchemy.orm import DeclarativeBase


class BaseEntity(DeclarativeBase):
    """Base class for all tokenbridge database entities."""
