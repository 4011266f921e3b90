"""Custom exception hierarchy for storehouse-cache."""

from __future__ import annotations


class StorehouseError(Exception):
    """Base exception for all storehouse-cache errors."""


class StoreConfigurationError(StorehouseError):
    """Raised when a connection spec names an unknown or unusable store."""


class MalformedRecordError(StorehouseError):
    """Raised when a stored object was not written by this connector."""
