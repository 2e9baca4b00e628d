"""Wires the recommendation pipeline to its real collaborators."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from steerdocs.catalog.local import InstalledDocuments, LocalCatalog
from steerdocs.config import Config
from steerdocs.github.client import GitHubClient
from steerdocs.github.fetcher import GitHubCatalog
from steerdocs.recommend.analyzer import WorkspaceAnalyzer
from steerdocs.recommend.cache import WorkspaceAnalysisCache
from steerdocs.recommend.filesystem import FileSystem, LocalFileSystem
from steerdocs.recommend.matcher import DocumentMatcher
from steerdocs.recommend.service import RecommendationService


@dataclass
class Recommender:
    service: RecommendationService
    cache: WorkspaceAnalysisCache
    client: GitHubClient | None = None
    workspace_root: str | None = None

    def close(self) -> None:
        self.cache.dispose()
        if self.client is not None:
            self.client.close()


def build_recommender(
    config: Config,
    workspace_root: str | Path | None,
    fs: FileSystem | None = None,
) -> Recommender:
    """Build a service for one workspace.

    Uses the local catalog when config.catalog_dir is set, otherwise GitHub.
    """
    fs = fs or LocalFileSystem()
    analyzer = WorkspaceAnalyzer(fs)
    cache = WorkspaceAnalysisCache(analyzer, fs)

    client: GitHubClient | None = None
    if config.catalog_dir is not None:
        catalog = LocalCatalog(str(config.catalog_dir), fs)
    else:
        client = GitHubClient(
            repo=config.catalog_repo,
            branch=config.catalog_branch,
            token=config.github_token,
        )
        catalog = GitHubCatalog(client)

    steering_dir = os.path.join(str(workspace_root or ""), config.steering_dir)
    installed = InstalledDocuments(steering_dir, fs)

    service = RecommendationService(
        workspace_root=workspace_root,
        cache=cache,
        matcher=DocumentMatcher(),
        catalog=catalog,
        installed=installed,
    )
    return Recommender(
        service=service,
        cache=cache,
        client=client,
        workspace_root=str(workspace_root) if workspace_root else None,
    )
