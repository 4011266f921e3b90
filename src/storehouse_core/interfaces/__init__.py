"""Public interface re-exports for storehouse_core."""

from storehouse_core.interfaces.store import (
    Failure,
    FetchResult,
    Found,
    NotFound,
    StoreBucket,
    StoreClient,
    StoreRecord,
)

__all__ = [
    "Failure",
    "FetchResult",
    "Found",
    "NotFound",
    "StoreBucket",
    "StoreClient",
    "StoreRecord",
]
