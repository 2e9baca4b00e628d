"""Thin wrapper around PyGithub for read access to the steering-docs catalog."""

from __future__ import annotations

from github import Auth, Github
from github.ContentFile import ContentFile
from github.Repository import Repository


class GitHubClient:
    """GitHub client scoped to a single repository and branch.

    The token is optional: public catalogs work unauthenticated, subject to
    GitHub's lower anonymous rate limit.

    Usage:
        client = GitHubClient(repo="owner/repo", branch="main")
        items = client.get_contents("code-quality")
    """

    def __init__(self, repo: str, branch: str = "main", token: str = "") -> None:
        self._gh = Github(auth=Auth.Token(token)) if token else Github()
        self._repo_name = repo
        self._branch = branch
        self._repo: Repository | None = None

    @property
    def repo(self) -> Repository:
        if self._repo is None:
            self._repo = self._gh.get_repo(self._repo_name)
        return self._repo

    @property
    def repo_name(self) -> str:
        return self._repo_name

    def get_contents(self, path: str) -> list[ContentFile]:
        """List a directory (or wrap a single file) on the configured branch."""
        contents = self.repo.get_contents(path, ref=self._branch)
        if not isinstance(contents, list):
            contents = [contents]
        return contents

    def get_text(self, path: str) -> str:
        item = self.repo.get_contents(path, ref=self._branch)
        if isinstance(item, list):
            raise IsADirectoryError(path)
        return item.decoded_content.decode("utf-8")

    def close(self) -> None:
        self._gh.close()
