"""Recommendation orchestration.

Pulls together the cached workspace context, the installed-document state and
a document catalog, then ranks and trims the catalog for the caller.

Interface Contract:
- get_recommendations(options) -> list[ScoredDocument]
- analyze_workspace() -> WorkspaceContext
- Both raise RecommendationError; branch on .code
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Protocol

from steerdocs.recommend.cache import WorkspaceAnalysisCache
from steerdocs.recommend.errors import ErrorCode, RecommendationError, no_workspace
from steerdocs.recommend.matcher import DocumentMatcher
from steerdocs.recommend.models import (
    DocumentMetadata,
    RecommendationOptions,
    ScoredDocument,
    WorkspaceContext,
)

logger = logging.getLogger(__name__)


class CatalogSource(Protocol):
    async def fetch_catalog(self) -> list[DocumentMetadata]: ...


class InstalledSource(Protocol):
    async def get_installed_document_names(self) -> list[str]: ...


class RecommendationService:
    def __init__(
        self,
        workspace_root: str | Path | None,
        cache: WorkspaceAnalysisCache,
        matcher: DocumentMatcher,
        catalog: CatalogSource,
        installed: InstalledSource,
    ) -> None:
        self._workspace_root = str(workspace_root) if workspace_root else None
        self._cache = cache
        self._matcher = matcher
        self._catalog = catalog
        self._installed = installed

    async def get_recommendations(
        self, options: RecommendationOptions | None = None
    ) -> list[ScoredDocument]:
        opts = options or RecommendationOptions()

        try:
            context = await self.analyze_workspace()
            documents = await self._fetch_catalog()
            ranked = self._matcher.rank_documents(documents, context)
        except RecommendationError:
            raise
        except Exception as e:
            raise RecommendationError(
                ErrorCode.ANALYSIS_FAILED, "Failed to generate recommendations", e
            ) from e

        results = filter_results(ranked, opts)
        logger.info(
            f"{len(results)} recommendation(s) from {len(documents)} catalog documents"
        )
        return results

    async def analyze_workspace(self) -> WorkspaceContext:
        """Return the cached context with the current installed-document names."""
        if not self._workspace_root:
            raise no_workspace()

        try:
            context = await self._cache.analyze(self._workspace_root)
            installed = await self._installed.get_installed_document_names()
        except RecommendationError:
            raise
        except Exception as e:
            raise RecommendationError(
                ErrorCode.ANALYSIS_FAILED, "Failed to analyze workspace context", e
            ) from e

        # Copy so the cached context is never mutated
        return dataclasses.replace(context, installed_docs=list(installed))

    async def _fetch_catalog(self) -> list[DocumentMetadata]:
        try:
            return await self._catalog.fetch_catalog()
        except Exception as e:
            logger.error(f"Catalog fetch failed: {e}")
            raise RecommendationError(
                ErrorCode.FETCH_FAILED,
                "Failed to fetch document list. Check your network connection and try again.",
                e,
            ) from e


def filter_results(
    ranked: list[ScoredDocument], options: RecommendationOptions
) -> list[ScoredDocument]:
    """Apply min score, installed exclusion and the result cap, keeping order."""
    results = [s for s in ranked if s.score >= options.min_score]
    if not options.include_installed:
        results = [s for s in results if not s.is_installed]
    return results[: max(options.max_results, 0)]
