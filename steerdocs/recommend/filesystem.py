"""Async filesystem primitives used by the recommendation pipeline.

The analyzer, cache and catalog scanners only talk to the ``FileSystem``
protocol, so tests can swap in an in-memory implementation. ``LocalFileSystem``
is the real thing: reads go through aiofiles, and watchers are asyncio tasks
that poll ``stat`` for changes.
"""

from __future__ import annotations

import asyncio
import logging
import os
from enum import Enum
from typing import Callable, Protocol

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0  # seconds


class FileType(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


class FileEvent(str, Enum):
    CREATED = "created"
    CHANGED = "changed"
    DELETED = "deleted"


WatchCallback = Callable[[FileEvent], None]


class Watcher(Protocol):
    def close(self) -> None: ...


class FileSystem(Protocol):
    async def stat(self, path: str) -> FileType:
        """Return the entry type, raising FileNotFoundError if it doesn't exist."""
        ...

    async def read_file(self, path: str) -> bytes: ...

    async def read_directory(self, path: str) -> list[tuple[str, FileType]]: ...

    async def watch(self, path: str, callback: WatchCallback) -> Watcher:
        """Start watching path. Changes made after this returns are reported."""
        ...


# stat failed for a reason other than the path not existing
_UNREADABLE = object()


class PollingWatcher:
    """Calls back on create/change/delete of a single path.

    ``start()`` records the baseline and launches the polling task; it must be
    awaited from inside a running event loop. A failed ``stat`` is logged and
    retried on the next tick.
    """

    def __init__(self, path: str, callback: WatchCallback, interval: float) -> None:
        self._path = path
        self._callback = callback
        self._interval = interval
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        baseline = await self._signature()
        self._task = asyncio.get_running_loop().create_task(self._run(baseline))

    async def _signature(self):
        """(mtime_ns, size), None if missing, or _UNREADABLE."""
        try:
            st = await aiofiles.os.stat(self._path)
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Could not stat {self._path}, retrying: {e}")
            return _UNREADABLE
        return (st.st_mtime_ns, st.st_size)

    async def _run(self, last) -> None:
        while True:
            await asyncio.sleep(self._interval)
            current = await self._signature()
            if current is _UNREADABLE or current == last:
                continue

            if last is None:
                event = FileEvent.CREATED
            elif current is None:
                event = FileEvent.DELETED
            else:
                event = FileEvent.CHANGED
            last = current

            logger.debug(f"{self._path}: {event.value}")
            try:
                self._callback(event)
            except Exception:
                logger.exception(f"Watch callback failed for {self._path}")

    @property
    def closed(self) -> bool:
        return self._task is None or self._task.done()

    def close(self) -> None:
        if self._task is not None:
            self._task.cancel()


class LocalFileSystem:
    """FileSystem backed by the host disk."""

    def __init__(self, poll_interval: float = DEFAULT_POLL_INTERVAL) -> None:
        self._poll_interval = poll_interval

    async def stat(self, path: str) -> FileType:
        await aiofiles.os.stat(path)  # raises FileNotFoundError
        if await aiofiles.os.path.isdir(path):
            return FileType.DIRECTORY
        if await aiofiles.os.path.isfile(path):
            return FileType.FILE
        return FileType.OTHER

    async def read_file(self, path: str) -> bytes:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    async def read_directory(self, path: str) -> list[tuple[str, FileType]]:
        entries: list[tuple[str, FileType]] = []
        for name in sorted(await aiofiles.os.listdir(path)):
            full = os.path.join(path, name)
            if await aiofiles.os.path.isdir(full):
                entries.append((name, FileType.DIRECTORY))
            elif await aiofiles.os.path.isfile(full):
                entries.append((name, FileType.FILE))
            else:
                entries.append((name, FileType.OTHER))
        return entries

    async def watch(self, path: str, callback: WatchCallback) -> PollingWatcher:
        watcher = PollingWatcher(path, callback, self._poll_interval)
        await watcher.start()
        return watcher
