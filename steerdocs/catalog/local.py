"""Filesystem-backed catalog and installed-document sources."""

from __future__ import annotations

import json
import logging
import os

from steerdocs.catalog.frontmatter import document_from_frontmatter, parse_frontmatter
from steerdocs.recommend.filesystem import FileSystem, FileType, LocalFileSystem
from steerdocs.recommend.models import DocumentMetadata

logger = logging.getLogger(__name__)

CATEGORIES_FILE = "categories.json"

# Repository infrastructure, not steering documents
IGNORED_CATEGORIES = {"docs", "templates"}


def is_steering_document(name: str) -> bool:
    return name.lower().endswith(".md") and name.lower() != "readme.md"


class LocalCatalog:
    """A steering-document catalog checked out on disk.

    Layout matches the GitHub catalog: one folder per category, optionally
    listed in categories.json, with markdown documents at any depth.
    """

    def __init__(self, root: str, fs: FileSystem | None = None) -> None:
        self._root = root
        self._fs = fs or LocalFileSystem()

    async def fetch_catalog(self) -> list[DocumentMetadata]:
        documents: list[DocumentMetadata] = []
        for category in await self._category_ids():
            if category.lower() in IGNORED_CATEGORIES:
                continue
            documents.extend(await self._scan(category, category))
        return documents

    async def _category_ids(self) -> list[str]:
        try:
            raw = await self._fs.read_file(os.path.join(self._root, CATEGORIES_FILE))
        except FileNotFoundError:
            entries = await self._fs.read_directory(self._root)
            return [
                name for name, file_type in entries
                if file_type == FileType.DIRECTORY and not name.startswith(".")
            ]

        data = json.loads(raw.decode("utf-8"))
        return [c["id"] for c in data.get("categories", []) if c.get("id")]

    async def _scan(self, rel_dir: str, category: str) -> list[DocumentMetadata]:
        documents: list[DocumentMetadata] = []
        try:
            entries = await self._fs.read_directory(os.path.join(self._root, rel_dir))
        except OSError as e:
            logger.error(f"Failed to read catalog directory {rel_dir}: {e}")
            return documents

        for name, file_type in entries:
            rel_path = f"{rel_dir}/{name}"
            if file_type == FileType.DIRECTORY:
                documents.extend(await self._scan(rel_path, category))
            elif file_type == FileType.FILE and is_steering_document(name):
                try:
                    raw = await self._fs.read_file(os.path.join(self._root, rel_path))
                    frontmatter, _ = parse_frontmatter(raw.decode("utf-8"))
                except (OSError, UnicodeDecodeError) as e:
                    logger.error(f"Failed to read {rel_path}: {e}")
                    continue
                documents.append(
                    document_from_frontmatter(name, rel_path, category, frontmatter)
                )
        return documents


class InstalledDocuments:
    """Names of steering documents installed under a workspace's steering dir."""

    def __init__(self, steering_dir: str, fs: FileSystem | None = None) -> None:
        self._steering_dir = steering_dir
        self._fs = fs or LocalFileSystem()

    async def get_installed_document_names(self) -> list[str]:
        try:
            if await self._fs.stat(self._steering_dir) != FileType.DIRECTORY:
                return []
        except FileNotFoundError:
            return []
        return await self._scan(self._steering_dir)

    async def _scan(self, path: str) -> list[str]:
        names: list[str] = []
        try:
            entries = await self._fs.read_directory(path)
        except OSError as e:
            logger.error(f"Failed to scan {path}: {e}")
            return names

        for name, file_type in entries:
            if file_type == FileType.FILE and name.lower().endswith(".md"):
                names.append(name)
            elif file_type == FileType.DIRECTORY:
                names.extend(await self._scan(os.path.join(path, name)))
        return names
