"""Application layer: services, DTOs and ports (interfaces)."""
