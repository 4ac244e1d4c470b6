"""Cached access to recent scan records."""

from dataclasses import dataclass

from checkin_tracker.adapters.record_store_client import RecordStoreClient
from checkin_tracker.domain.records import ScanRecord
from checkin_tracker.services.cache import Cache

CACHE_PREFIX = "scan-records"


@dataclass
class RecordHistory:
    """Fetches record lists and keeps them until invalidated or expired."""

    store: RecordStoreClient
    cache: Cache
    ttl_seconds: int = 30
    limit: int = 50

    async def list_records(
        self,
        filter_type: str | None = None,
        sandbox: str | None = None,
        limit: int | None = None,
    ) -> list[ScanRecord]:
        """Return records for a query, from cache when still fresh."""
        resolved_limit = limit or self.limit
        cache_key = (
            f"{CACHE_PREFIX}:{filter_type or 'all'}:{sandbox or ''}:{resolved_limit}"
        )
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached
        records = await self.store.list_records(
            filter_type=filter_type, sandbox=sandbox, limit=resolved_limit
        )
        self.cache.set(cache_key, records, ttl_seconds=self.ttl_seconds)
        return records

    def invalidate(self) -> None:
        """Forget every cached record list so the next read refetches."""
        self.cache.invalidate(CACHE_PREFIX)
