"""Configuration loading for steerdocs.

Config sources (in priority order):
1. Explicit arguments passed to functions / CLI options
2. Environment variables (STEERDOCS_GITHUB_TOKEN, etc.)
3. .env file in current directory
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CATALOG_REPO = "mikeartee/kiro-steering-docs"
DEFAULT_CATALOG_BRANCH = "main"
DEFAULT_STEERING_DIR = ".kiro/steering"

REPO_RE = re.compile(r"^[\w.-]+/[\w.-]+$")


@dataclass
class Config:
    github_token: str = ""  # optional, raises the API rate limit
    catalog_repo: str = DEFAULT_CATALOG_REPO  # "owner/repo"
    catalog_branch: str = DEFAULT_CATALOG_BRANCH
    catalog_dir: Path | None = None  # local catalog checkout; overrides GitHub
    steering_dir: str = DEFAULT_STEERING_DIR  # relative to the workspace root
    workspace: Path | None = None

    @classmethod
    def load(cls) -> Config:
        catalog_dir = os.getenv("STEERDOCS_CATALOG_DIR", "")
        workspace = os.getenv("STEERDOCS_WORKSPACE", "")
        return cls(
            github_token=os.getenv("STEERDOCS_GITHUB_TOKEN", ""),
            catalog_repo=os.getenv("STEERDOCS_CATALOG_REPO", DEFAULT_CATALOG_REPO),
            catalog_branch=os.getenv("STEERDOCS_CATALOG_BRANCH", DEFAULT_CATALOG_BRANCH),
            catalog_dir=Path(catalog_dir) if catalog_dir else None,
            steering_dir=os.getenv("STEERDOCS_STEERING_DIR", DEFAULT_STEERING_DIR),
            workspace=Path(workspace) if workspace else None,
        )

    def validate(self) -> list[str]:
        """Return a list of config issues."""
        issues = []
        if self.catalog_dir is None and not REPO_RE.match(self.catalog_repo):
            issues.append(
                f"Catalog repository '{self.catalog_repo}' is not in owner/repo form "
                "(STEERDOCS_CATALOG_REPO)"
            )
        if self.catalog_dir is not None and not self.catalog_dir.is_dir():
            issues.append(f"Catalog directory not found: {self.catalog_dir} (STEERDOCS_CATALOG_DIR)")
        return issues
