"""Fetches the steering-document catalog from a GitHub repository.

The catalog repo lists its categories in categories.json at the root; each
category id is also a top-level folder holding markdown documents, possibly
nested. Document recommendation hints come from each file's frontmatter.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Callable

from github.ContentFile import ContentFile
from github.GithubException import GithubException

from steerdocs.catalog.frontmatter import document_from_frontmatter, parse_frontmatter
from steerdocs.catalog.local import CATEGORIES_FILE, IGNORED_CATEGORIES, is_steering_document
from steerdocs.github.client import GitHubClient
from steerdocs.recommend.models import DocumentMetadata

logger = logging.getLogger(__name__)

CATALOG_TTL_SECONDS = 60 * 60


class GitHubCatalog:
    """Catalog source backed by a GitHub repository.

    The document list is held in memory for CATALOG_TTL_SECONDS. When a
    refresh fails, the last good list is served even if it has expired; with
    no list to fall back on, the error propagates.
    """

    def __init__(
        self,
        client: GitHubClient,
        ttl: float = CATALOG_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._ttl = ttl
        self._clock = clock
        self._cached: list[DocumentMetadata] | None = None
        self._cached_at = 0.0

    async def fetch_catalog(self) -> list[DocumentMetadata]:
        # PyGithub is blocking
        return await asyncio.to_thread(self.fetch_documents)

    def fetch_documents(self) -> list[DocumentMetadata]:
        if self._cached is not None and self._clock() - self._cached_at < self._ttl:
            return self._cached

        try:
            documents = self._fetch_all()
        except (GithubException, OSError, ValueError) as e:
            if self._cached is not None:
                logger.warning(f"Catalog refresh failed, serving cached list: {e}")
                return self._cached
            raise

        self._cached = documents
        self._cached_at = self._clock()
        return documents

    def clear_cache(self) -> None:
        self._cached = None

    def _fetch_all(self) -> list[DocumentMetadata]:
        categories = json.loads(self._client.get_text(CATEGORIES_FILE)).get("categories", [])
        logger.info(f"Fetching {len(categories)} categories from {self._client.repo_name}")

        documents: list[DocumentMetadata] = []
        for category in categories:
            category_id = category.get("id", "")
            if not category_id or category_id.lower() in IGNORED_CATEGORIES:
                continue
            documents.extend(self._fetch_directory(category_id, category_id))
        return documents

    def _fetch_directory(self, path: str, category: str) -> list[DocumentMetadata]:
        """Recursively collect documents. A directory that fails is skipped."""
        documents: list[DocumentMetadata] = []
        try:
            contents = self._client.get_contents(path)
        except GithubException as e:
            logger.error(f"Failed to list {path}: {e}")
            return documents

        for item in contents:
            if item.type == "dir":
                documents.extend(self._fetch_directory(item.path, category))
            elif item.type == "file" and is_steering_document(item.name):
                doc = self._fetch_document(item, category)
                if doc:
                    documents.append(doc)
        return documents

    def _fetch_document(self, item: ContentFile, category: str) -> DocumentMetadata | None:
        try:
            content = item.decoded_content
            if content is None:
                return None
            frontmatter, _ = parse_frontmatter(content.decode("utf-8"))
        except (GithubException, UnicodeDecodeError) as e:
            logger.error(f"Failed to fetch {item.path}: {e}")
            return None

        return document_from_frontmatter(
            name=item.name,
            path=item.path,
            category=category,
            frontmatter=frontmatter,
            sha=item.sha,
            download_url=item.download_url or "",
        )
