"""Observability: structured logging."""

from storehouse_infra.observability.logging import configure_logging

__all__ = [
    "configure_logging",
]
