"""Infrastructure layer implementations."""

from warehouse.infrastructure import storage

__all__ = ["storage"]
