"""Persistence: course records behind SQLAlchemy async sessions."""
