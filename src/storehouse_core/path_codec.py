"""Cache key escaping for use as store keys."""

from __future__ import annotations

from urllib.parse import quote_plus


def encode(path: str | None, skip_escape: bool = False) -> str | None:
    """Return the store key for a cache path.

    Spaces become ``+`` and reserved characters are percent-encoded.
    ``skip_escape`` passes an already-encoded key through untouched.
    """
    if path is None:
        return None
    if skip_escape:
        return path
    return quote_plus(path, safe="")
