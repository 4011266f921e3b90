"""In-process implementation of StoreClient."""

from __future__ import annotations

import copy

from storehouse_core.interfaces.store import FetchResult, Found, NotFound, StoreRecord


class MemoryBucket:
    """Dict-backed bucket with range queries over integer indexes."""

    def __init__(self, name: str, records: dict[str, StoreRecord]) -> None:
        """Initialize with the bucket name and its shared record map."""
        self.name = name
        self._records = records

    def get(self, key: str) -> FetchResult:
        """Fetch a copy of the record at ``key``."""
        record = self._records.get(key)
        if record is None:
            return NotFound()
        return Found(copy.deepcopy(record))

    def get_or_new(self, key: str) -> StoreRecord | None:
        """Fetch a copy of the record at ``key`` or an empty unsaved one."""
        record = self._records.get(key)
        if record is None:
            return StoreRecord(key=key)
        return copy.deepcopy(record)

    def store(self, record: StoreRecord) -> StoreRecord:
        """Persist a snapshot of the record."""
        self._records[record.key] = copy.deepcopy(record)
        return record

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        self._records.pop(key, None)

    def get_index(self, index: str, start: int, end: int) -> list[str]:
        """Return keys with ``index`` in ``[start, end)``, either direction."""
        if start == end:
            return []
        descending = start > end
        hits: list[tuple[int, str]] = []
        for key, record in self._records.items():
            value = record.indexes.get(index)
            if value is None:
                continue
            if descending:
                in_range = end < value <= start
            else:
                in_range = start <= value < end
            if in_range:
                hits.append((value, key))
        hits.sort(reverse=descending)
        return [key for _, key in hits]


class MemoryStoreClient:
    """Store client keeping every bucket in process memory."""

    def __init__(self) -> None:
        """Initialize with no buckets."""
        self._buckets: dict[str, dict[str, StoreRecord]] = {}

    def bucket(self, name: str) -> MemoryBucket:
        """Return the bucket called ``name``; buckets share state by name."""
        return MemoryBucket(name, self._buckets.setdefault(name, {}))

    def close(self) -> None:
        """Nothing to release."""
