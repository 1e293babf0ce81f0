"""Application interfaces (ports) implemented by infrastructure."""

from coursestore.application.interfaces.repositories import ICourseLookup

__all__ = ["ICourseLookup"]
