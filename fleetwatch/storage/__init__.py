"""Storage layer for whole-document JSON persistence."""

from fleetwatch.storage.documents import JsonDocument

__all__ = ["JsonDocument"]
