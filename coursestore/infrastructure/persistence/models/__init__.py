"""SQLAlchemy ORM models."""

from coursestore.infrastructure.persistence.models.course import Course

__all__ = ["Course"]
