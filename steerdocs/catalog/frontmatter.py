"""YAML frontmatter parsing for steering documents.

Steering documents declare their recommendation hints in a YAML block at the
top of the file:

    ---
    description: React component conventions
    tags: [react, typescript]
    requiredDependencies: [react]
    filePatterns: ["components/**/*.tsx"]
    ---

    # React Guidelines
    ...

This module only reads frontmatter; it never rewrites it.
"""

from __future__ import annotations

import logging
import re

import yaml

from steerdocs.recommend.models import DocumentMetadata

logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n(.*))?$", re.DOTALL)


def parse_frontmatter(content: str) -> tuple[dict, str]:
    """Split markdown into (metadata, body).

    Returns ({}, content) when there is no frontmatter, when the YAML is
    invalid, or when it doesn't parse to a mapping.
    """
    match = FRONTMATTER_RE.match(content)
    if not match:
        return {}, content

    try:
        metadata = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse YAML frontmatter: {e}")
        return {}, content

    if not isinstance(metadata, dict):
        return {}, content

    return metadata, (match.group(2) or "").lstrip()


def document_from_frontmatter(
    name: str,
    path: str,
    category: str,
    frontmatter: dict,
    sha: str = "",
    download_url: str = "",
) -> DocumentMetadata:
    return DocumentMetadata(
        name=name,
        path=path,
        category=category,
        description=str(frontmatter.get("description") or ""),
        version=str(frontmatter.get("version") or "1.0.0"),
        sha=sha or str(frontmatter.get("sha") or ""),
        download_url=download_url,
        tags=_string_list(frontmatter, "tags"),
        required_dependencies=_string_list(
            frontmatter, "requiredDependencies", "required_dependencies"
        ),
        file_patterns=_string_list(frontmatter, "filePatterns", "file_patterns"),
    )


def _string_list(frontmatter: dict, *keys: str) -> list[str] | None:
    """Read the first present key as a list of strings. Missing -> None."""
    for key in keys:
        if key not in frontmatter:
            continue
        value = frontmatter[key]
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [str(item) for item in value if item is not None]
        logger.warning(f"Ignoring frontmatter '{key}': expected a list, got {type(value).__name__}")
        return None
    return None
