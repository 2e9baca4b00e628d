"""Shared test fixtures for steerdocs."""

from __future__ import annotations

import json
import posixpath

import pytest

from steerdocs.recommend.filesystem import FileEvent, FileType, WatchCallback
from steerdocs.recommend.models import (
    DependencyCategory,
    DependencyInfo,
    DocumentMetadata,
    FilePattern,
    FrameworkInfo,
    ProjectType,
    WorkspaceContext,
)

WORKSPACE = "/work/webapp"


class FakeWatcher:
    def __init__(self, path: str, callback: WatchCallback) -> None:
        self.path = path
        self.callback = callback
        self.closed = False

    def close(self) -> None:
        self.closed = True


class MemoryFileSystem:
    """In-memory FileSystem. Directories exist implicitly above every file."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.dirs: set[str] = set()
        self.watchers: list[FakeWatcher] = []
        self.listed: list[str] = []  # every path passed to read_directory

    def add_file(self, path: str, content: str | bytes = "") -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.files[posixpath.normpath(path)] = content

    def add_json(self, path: str, data: object) -> None:
        self.add_file(path, json.dumps(data))

    def add_dir(self, path: str) -> None:
        self.dirs.add(posixpath.normpath(path))

    def remove(self, path: str) -> None:
        self.files.pop(posixpath.normpath(path), None)

    def _is_dir(self, path: str) -> bool:
        if path in self.dirs:
            return True
        prefix = path.rstrip("/") + "/"
        return any(p.startswith(prefix) for p in self.files) or any(
            d.startswith(prefix) for d in self.dirs
        )

    async def stat(self, path: str) -> FileType:
        path = posixpath.normpath(path)
        if path in self.files:
            return FileType.FILE
        if self._is_dir(path):
            return FileType.DIRECTORY
        raise FileNotFoundError(path)

    async def read_file(self, path: str) -> bytes:
        path = posixpath.normpath(path)
        if path in self.files:
            return self.files[path]
        if self._is_dir(path):
            raise IsADirectoryError(path)
        raise FileNotFoundError(path)

    async def read_directory(self, path: str) -> list[tuple[str, FileType]]:
        path = posixpath.normpath(path)
        if path in self.files:
            raise NotADirectoryError(path)
        if not self._is_dir(path):
            raise FileNotFoundError(path)
        self.listed.append(path)

        prefix = path.rstrip("/") + "/"
        children: dict[str, FileType] = {}
        for p in self.files:
            if p.startswith(prefix):
                head, _, rest = p[len(prefix):].partition("/")
                children[head] = FileType.DIRECTORY if rest else FileType.FILE
        for d in self.dirs:
            if d.startswith(prefix):
                head = d[len(prefix):].split("/")[0]
                children.setdefault(head, FileType.DIRECTORY)
        return sorted(children.items())

    async def watch(self, path: str, callback: WatchCallback) -> FakeWatcher:
        watcher = FakeWatcher(posixpath.normpath(path), callback)
        self.watchers.append(watcher)
        return watcher

    def fire(self, path: str, event: FileEvent = FileEvent.CHANGED) -> None:
        """Deliver an event to every open watcher on path."""
        path = posixpath.normpath(path)
        for watcher in self.watchers:
            if watcher.path == path and not watcher.closed:
                watcher.callback(event)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    return MemoryFileSystem()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def react_workspace(memory_fs: MemoryFileSystem) -> MemoryFileSystem:
    """A React + TypeScript web app with components and a couple of tests."""
    memory_fs.add_json(f"{WORKSPACE}/package.json", {
        "name": "webapp",
        "dependencies": {"react": "18.2.0", "react-dom": "18.2.0", "axios": "1.6.0"},
        "devDependencies": {"typescript": "5.1.0", "jest": "29.0.0"},
    })
    memory_fs.add_file(f"{WORKSPACE}/tsconfig.json", "{}")
    memory_fs.add_file(f"{WORKSPACE}/src/components/Button.tsx")
    memory_fs.add_file(f"{WORKSPACE}/src/components/Modal.tsx")
    memory_fs.add_file(f"{WORKSPACE}/src/components/Button.test.tsx")
    memory_fs.add_file(f"{WORKSPACE}/src/utils/format.spec.ts")
    memory_fs.add_file(f"{WORKSPACE}/node_modules/react/index.test.js")
    return memory_fs


@pytest.fixture
def sample_context() -> WorkspaceContext:
    return WorkspaceContext(
        languages={"javascript", "typescript"},
        frameworks=[FrameworkInfo(name="react", version="18.2.0", confidence=0.9)],
        dependencies=[
            DependencyInfo(name="react", version="18.2.0", category=DependencyCategory.FRAMEWORK),
            DependencyInfo(name="axios", version="1.6.0"),
            DependencyInfo(
                name="jest", version="29.0.0", is_dev=True, category=DependencyCategory.TESTING
            ),
        ],
        file_patterns=[FilePattern(pattern="src/components/**/*", count=3, significance=0.3)],
        has_tests=True,
        project_type=ProjectType.WEB_APP,
    )


@pytest.fixture
def sample_documents() -> list[DocumentMetadata]:
    return [
        DocumentMetadata(
            name="react-components.md",
            path="frameworks/react-components.md",
            category="frameworks",
            tags=["react", "typescript"],
            required_dependencies=["react"],
            file_patterns=["components/**/*"],
        ),
        DocumentMetadata(
            name="jest-testing.md",
            path="testing/jest-testing.md",
            category="testing",
            tags=["testing"],
            required_dependencies=["jest"],
        ),
        DocumentMetadata(
            name="typescript-style.md",
            path="code-quality/typescript-style.md",
            category="code-quality",
            tags=["typescript"],
        ),
        DocumentMetadata(
            name="django-views.md",
            path="frameworks/django-views.md",
            category="frameworks",
            tags=["django", "python"],
            required_dependencies=["django"],
        ),
    ]
