"""Time-boxed cache around WorkspaceAnalyzer.

Entries live for CACHE_TTL_SECONDS and are dropped early when package.json or
tsconfig.json in the workspace root is created, changed or deleted.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable

from steerdocs.recommend.analyzer import (
    MANIFEST_FILE,
    TYPESCRIPT_CONFIG_FILE,
    WorkspaceAnalyzer,
)
from steerdocs.recommend.filesystem import FileEvent, FileSystem, LocalFileSystem, Watcher
from steerdocs.recommend.models import WorkspaceContext

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 5 * 60
WATCHED_FILES = (MANIFEST_FILE, TYPESCRIPT_CONFIG_FILE)


@dataclass
class CacheEntry:
    """Everything the cache holds for one workspace root."""

    context: WorkspaceContext | None = None
    timestamp: float = 0.0
    watchers: list[Watcher] = field(default_factory=list)
    # Bumped on every invalidation so in-flight analyses can tell they're stale
    generation: int = 0


class WorkspaceAnalysisCache:
    def __init__(
        self,
        analyzer: WorkspaceAnalyzer,
        fs: FileSystem | None = None,
        ttl: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._analyzer = analyzer
        self._fs = fs or LocalFileSystem()
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    async def analyze(self, workspace_root: str | None) -> WorkspaceContext:
        if not workspace_root:
            # Let the analyzer raise NO_WORKSPACE
            return await self._analyzer.analyze(workspace_root)

        key = cache_key(workspace_root)
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = CacheEntry()
            # Watch before the first read so edits made during analysis count
            await self._watch(key, entry)

        if entry.context is not None:
            if self._clock() - entry.timestamp < self._ttl:
                return entry.context
            logger.debug(f"Cache expired for {key}")
            entry.context = None

        generation = entry.generation
        context = await self._analyzer.analyze(key)

        # dispose() or an invalidation may have run while we were suspended
        if self._entries.get(key) is entry and entry.generation == generation:
            entry.context = context
            entry.timestamp = self._clock()
        else:
            logger.debug(f"{key} changed during analysis, not caching")

        return context

    async def _watch(self, key: str, entry: CacheEntry) -> None:
        def on_event(event: FileEvent) -> None:
            logger.info(f"Workspace config {event.value}, invalidating {key}")
            self.invalidate(key)

        for name in WATCHED_FILES:
            watcher = await self._fs.watch(os.path.join(key, name), on_event)
            if self._entries.get(key) is not entry:
                # Disposed while registering; dispose() closed the earlier ones
                watcher.close()
                return
            entry.watchers.append(watcher)

    def invalidate(self, workspace_root: str) -> None:
        entry = self._entries.get(cache_key(workspace_root))
        if entry is not None:
            entry.context = None
            entry.generation += 1

    def clear_all(self) -> None:
        """Drop every cached context. Watchers stay registered."""
        for entry in self._entries.values():
            entry.context = None
            entry.generation += 1

    def dispose(self) -> None:
        for entry in self._entries.values():
            for watcher in entry.watchers:
                watcher.close()
        self._entries.clear()


def cache_key(workspace_root: str) -> str:
    return os.path.normpath(os.path.abspath(workspace_root))
