"""Manual verification: fetch the steering-document catalog from GitHub.

Usage:
    uv run python scripts/check_catalog.py [owner/repo]

Uses STEERDOCS_CATALOG_REPO (or the default public catalog) if no argument
is given. STEERDOCS_GITHUB_TOKEN is optional but avoids the anonymous rate
limit.
"""

from __future__ import annotations

import sys

from steerdocs.config import Config
from steerdocs.github.client import GitHubClient
from steerdocs.github.fetcher import GitHubCatalog


def main() -> None:
    config = Config.load()

    # Allow repo override from CLI arg
    repo = sys.argv[1] if len(sys.argv) > 1 else config.catalog_repo

    print(f"Connecting to {repo}@{config.catalog_branch}...")
    client = GitHubClient(repo=repo, branch=config.catalog_branch, token=config.github_token)

    try:
        documents = GitHubCatalog(client).fetch_documents()

        by_category: dict[str, list] = {}
        for doc in documents:
            by_category.setdefault(doc.category, []).append(doc)

        for category, docs in sorted(by_category.items()):
            print(f"\n--- {category} ({len(docs)}) ---")
            for doc in docs:
                print(f"  {doc.path}")
                if doc.description:
                    print(f"    {doc.description[:100]}")
                print(f"    tags: {doc.tags}")
                print(f"    requires: {doc.required_dependencies}")
                print(f"    patterns: {doc.file_patterns}")

        print(f"\n{len(documents)} documents in {len(by_category)} categories")
    finally:
        client.close()


if __name__ == "__main__":
    main()
