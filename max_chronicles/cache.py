"""In-memory cache holding the latest scan snapshot per content type."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from enum import Enum
from logging import Logger
from typing import Callable, Dict, Set

from .scanner import SAMPLE_DATA, ContentRootMissing, ContentScanner, ContentType, ScanSnapshot, utcnow

DEFAULT_TTL = timedelta(days=7)


class CacheState(str, Enum):
    EMPTY = "empty"
    SCANNING = "scanning"
    FRESH = "fresh"
    EXPIRED = "expired"


class MetadataCache:
    """Serve scan snapshots until they expire, rescanning on demand.

    Every content type is cached independently. A snapshot is fresh while
    ``now - snapshot.last_updated <= ttl``; reading an empty or expired
    entry triggers a synchronous scan. There is no locking: two concurrent
    misses may both scan and the last one to finish wins.

    Parameters
    ----------
    scanner:
        Scanner used to build new snapshots.
    ttl:
        Maximum age of a snapshot before it is refreshed on read.
    clock:
        Callable returning the current aware ``datetime``; tests replace it.
    logger:
        Destination for refresh messages.
    """

    def __init__(
        self,
        scanner: ContentScanner,
        *,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] | None = None,
        logger: Logger | None = None,
    ):
        self.scanner = scanner
        self.ttl = ttl
        self.clock = clock or utcnow
        self.logger = logger or logging.getLogger(__name__)
        self._snapshots: Dict[ContentType, ScanSnapshot] = {}
        self._scanning: Set[ContentType] = set()

    def init(self) -> None:
        """Eagerly populate the cache for every content type."""

        for content_type in ContentType:
            snapshot = self.force_refresh(content_type)
            self.logger.info("Initial %s scan complete at %s", content_type.value, snapshot.last_updated)

    def peek(self, content_type: ContentType) -> ScanSnapshot | None:
        """Return the cached snapshot without triggering a scan."""

        return self._snapshots.get(content_type)

    def state(self, content_type: ContentType) -> CacheState:
        if content_type in self._scanning:
            return CacheState.SCANNING
        snapshot = self._snapshots.get(content_type)
        if snapshot is None:
            return CacheState.EMPTY
        if self._is_fresh(snapshot):
            return CacheState.FRESH
        return CacheState.EXPIRED

    def get_or_refresh(self, content_type: ContentType) -> ScanSnapshot:
        """Return the cached snapshot, scanning first when empty or expired."""

        snapshot = self._snapshots.get(content_type)
        if snapshot is not None and self._is_fresh(snapshot):
            return snapshot

        self.logger.info("Auto-refreshing %s data", content_type.value)
        return self.force_refresh(content_type)

    def force_refresh(self, content_type: ContentType) -> ScanSnapshot:
        """Rescan *content_type* unconditionally and store the result."""

        self._scanning.add(content_type)
        try:
            snapshot = self._scan(content_type)
        finally:
            self._scanning.discard(content_type)

        self._snapshots[content_type] = snapshot
        return snapshot

    def _scan(self, content_type: ContentType) -> ScanSnapshot:
        try:
            snapshot = self.scanner.scan(content_type)
        except ContentRootMissing as exc:
            self.logger.warning("%s; serving sample %s data", exc, content_type.value)
            snapshot = SAMPLE_DATA[content_type]()

        # last_updated always comes from the cache clock.
        return ScanSnapshot(snapshot.content_type, self.clock(), snapshot.payload)

    def _is_fresh(self, snapshot: ScanSnapshot) -> bool:
        return self.clock() - snapshot.last_updated <= self.ttl
