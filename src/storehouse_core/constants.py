"""Shared constants for storehouse-cache."""

from __future__ import annotations

DEFAULT_BUCKET = "page_cache"
JSON_CONTENT_TYPE = "application/json"

# Timestamp fields kept out of the stored body
CREATED_AT_FIELD = "created_at"
EXPIRES_AT_FIELD = "expires_at"
RESERVED_FIELDS = (CREATED_AT_FIELD, EXPIRES_AT_FIELD)

# Secondary index names
CREATED_AT_INDEX = "created_at_int"
EXPIRES_AT_INDEX = "expires_at_int"

# Sweep windows
SWEEP_WINDOW_SECONDS = 24 * 60 * 60  # one day
SWEEP_HORIZON_SECONDS = 60 * SWEEP_WINDOW_SECONDS  # two months
