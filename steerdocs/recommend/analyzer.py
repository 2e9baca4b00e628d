"""Workspace analysis: project files -> WorkspaceContext.

Reads package.json, walks a handful of well-known directories, and looks for
config files to fingerprint the project's technology stack. Every sub-step
degrades to partial data on failure; only a missing workspace root (or an
unexpected bug) aborts the analysis.
"""

from __future__ import annotations

import json
import logging
import os
import re

from steerdocs.recommend.errors import ErrorCode, RecommendationError, no_workspace
from steerdocs.recommend.filesystem import FileSystem, FileType, LocalFileSystem
from steerdocs.recommend.models import (
    DependencyCategory,
    DependencyInfo,
    FilePattern,
    FrameworkInfo,
    ProjectType,
    WorkspaceContext,
)

logger = logging.getLogger(__name__)

MANIFEST_FILE = "package.json"
TYPESCRIPT_CONFIG_FILE = "tsconfig.json"
EXCLUDED_DIR = "node_modules"
MAX_DEPTH = 5

COMPONENT_DIRS = ["components", "src/components", "app/components"]
API_DIRS = ["routes", "api", "pages/api", "src/routes", "src/api"]
STRUCTURE_NORMALIZER = 10

TEST_FILE_RE = re.compile(r"\.(?:test|spec)\.(?:ts|tsx|js|jsx|mjs|cjs)$")
TEST_PATTERN = "**/*.{test,spec}.{ts,js,tsx,jsx}"
TEST_NORMALIZER = 20

# framework name -> (dependency names that imply it, confidence)
FRAMEWORK_PATTERNS: dict[str, tuple[list[str], float]] = {
    "react": (["react"], 0.9),
    "vue": (["vue"], 0.9),
    "angular": (["@angular/core"], 0.9),
    "svelte": (["svelte"], 0.9),
    "next.js": (["next"], 0.95),
    "nuxt": (["nuxt"], 0.95),
    "express": (["express"], 0.85),
    "fastify": (["fastify"], 0.85),
    "nestjs": (["@nestjs/core"], 0.9),
}

# Substring keywords, checked in order
CATEGORY_KEYWORDS: list[tuple[DependencyCategory, list[str]]] = [
    (
        DependencyCategory.FRAMEWORK,
        ["react", "vue", "angular", "svelte", "next", "nuxt",
         "express", "fastify", "koa", "hapi", "nestjs"],
    ),
    (
        DependencyCategory.TESTING,
        ["jest", "mocha", "vitest", "jasmine", "karma", "cypress",
         "playwright", "testing-library"],
    ),
    (
        DependencyCategory.BUILD,
        ["webpack", "vite", "rollup", "parcel", "esbuild", "babel",
         "typescript", "tsc", "swc"],
    ),
]

TYPESCRIPT_DEPENDENCIES = {"typescript", "@types/node"}
EXTENSION_MARKERS = {"vscode", "@types/vscode"}
CLI_MARKERS = {"commander", "yargs", "inquirer", "chalk", "ora"}
API_FRAMEWORKS = {"express", "fastify", "koa", "hapi", "@nestjs/core"}
WEB_FRAMEWORKS = ["react", "vue", "angular", "svelte", "next", "nuxt"]


class WorkspaceAnalyzer:
    """Builds a WorkspaceContext for a workspace root."""

    def __init__(self, fs: FileSystem | None = None) -> None:
        self._fs = fs or LocalFileSystem()

    async def analyze(self, workspace_root: str | None) -> WorkspaceContext:
        if not workspace_root:
            raise no_workspace()

        try:
            dependencies = await self._read_dependencies(workspace_root)
            frameworks = detect_frameworks(dependencies)
            file_patterns, has_tests = await self._analyze_file_structure(workspace_root)
            languages = await self._detect_languages(workspace_root, dependencies)
            project_type = categorize_project_type(dependencies, file_patterns)
        except RecommendationError:
            raise
        except Exception as e:
            raise RecommendationError(
                ErrorCode.ANALYSIS_FAILED, "Failed to analyze workspace context", e
            ) from e

        logger.info(
            f"Analyzed {workspace_root}: languages={sorted(languages)} "
            f"frameworks={[f.name for f in frameworks]} "
            f"dependencies={len(dependencies)} type={project_type.value} tests={has_tests}"
        )

        return WorkspaceContext(
            languages=languages,
            frameworks=frameworks,
            dependencies=dependencies,
            file_patterns=file_patterns,
            has_tests=has_tests,
            project_type=project_type,
        )

    async def _read_dependencies(self, workspace_root: str) -> list[DependencyInfo]:
        """Parse package.json into a flat list. Any failure yields []."""
        manifest_path = os.path.join(workspace_root, MANIFEST_FILE)
        try:
            raw = await self._fs.read_file(manifest_path)
        except FileNotFoundError:
            logger.debug(f"No {MANIFEST_FILE} in {workspace_root}")
            return []
        except OSError as e:
            logger.warning(f"Could not read {manifest_path}: {e}")
            return []

        try:
            manifest = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to parse {manifest_path}: {e}")
            return []

        if not isinstance(manifest, dict):
            logger.warning(f"Ignoring {manifest_path}: top level is not an object")
            return []

        return parse_dependencies(manifest)

    async def _analyze_file_structure(
        self, workspace_root: str
    ) -> tuple[list[FilePattern], bool]:
        file_patterns: list[FilePattern] = []

        for rel_dir in COMPONENT_DIRS + API_DIRS:
            count = await self._count_in_directory(os.path.join(workspace_root, rel_dir))
            if count > 0:
                file_patterns.append(
                    FilePattern(
                        pattern=f"{rel_dir}/**/*",
                        count=count,
                        significance=min(count / STRUCTURE_NORMALIZER, 1.0),
                    )
                )

        test_count = await self._count_files(workspace_root, 0, _is_test_file)
        has_tests = test_count > 0
        if has_tests:
            file_patterns.append(
                FilePattern(
                    pattern=TEST_PATTERN,
                    count=test_count,
                    significance=min(test_count / TEST_NORMALIZER, 1.0),
                )
            )

        return file_patterns, has_tests

    async def _count_in_directory(self, path: str) -> int:
        try:
            if await self._fs.stat(path) != FileType.DIRECTORY:
                return 0
        except OSError:
            return 0
        return await self._count_files(path, 0, _any_file)

    async def _count_files(self, path: str, depth: int, predicate) -> int:
        """Count files under path matching predicate, skipping node_modules.

        Only levels 0..MAX_DEPTH-1 below the starting directory are visited.
        """
        if depth >= MAX_DEPTH:
            return 0

        try:
            entries = await self._fs.read_directory(path)
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {path}: {e}")
            return 0

        count = 0
        for name, file_type in entries:
            if name == EXCLUDED_DIR:
                continue
            if file_type == FileType.FILE:
                if predicate(name):
                    count += 1
            elif file_type == FileType.DIRECTORY:
                count += await self._count_files(
                    os.path.join(path, name), depth + 1, predicate
                )
        return count

    async def _detect_languages(
        self, workspace_root: str, dependencies: list[DependencyInfo]
    ) -> set[str]:
        languages = {"javascript"}

        try:
            await self._fs.stat(os.path.join(workspace_root, TYPESCRIPT_CONFIG_FILE))
            languages.add("typescript")
        except OSError:
            pass

        if any(dep.name in TYPESCRIPT_DEPENDENCIES for dep in dependencies):
            languages.add("typescript")

        return languages


def _any_file(name: str) -> bool:
    return True


def _is_test_file(name: str) -> bool:
    return bool(TEST_FILE_RE.search(name))


def parse_dependencies(manifest: dict) -> list[DependencyInfo]:
    """Merge dependencies and devDependencies, tagging each with is_dev."""
    dependencies: list[DependencyInfo] = []
    for section, is_dev in (("dependencies", False), ("devDependencies", True)):
        entries = manifest.get(section)
        if not isinstance(entries, dict):
            if entries is not None:
                logger.warning(f"Ignoring '{section}': expected an object")
            continue
        for name, version in entries.items():
            dependencies.append(
                DependencyInfo(
                    name=name,
                    version=str(version),
                    is_dev=is_dev,
                    category=categorize_dependency(name),
                )
            )
    return dependencies


def categorize_dependency(name: str) -> DependencyCategory:
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return category
    return DependencyCategory.UTILITY


def detect_frameworks(dependencies: list[DependencyInfo]) -> list[FrameworkInfo]:
    """Map dependencies to frameworks, keeping the most confident match per framework."""
    best: dict[str, FrameworkInfo] = {}
    for dep in dependencies:
        for framework, (patterns, confidence) in FRAMEWORK_PATTERNS.items():
            if not any(dep.name == p or dep.name.startswith(p + "/") for p in patterns):
                continue
            current = best.get(framework)
            if current is None or current.confidence < confidence:
                best[framework] = FrameworkInfo(
                    name=framework, version=dep.version, confidence=confidence
                )
    return list(best.values())


def categorize_project_type(
    dependencies: list[DependencyInfo], file_patterns: list[FilePattern]
) -> ProjectType:
    """Classify the project. Checks run in fixed priority order."""
    dep_names = [dep.name for dep in dependencies]

    if any(name in EXTENSION_MARKERS for name in dep_names):
        return ProjectType.VSCODE_EXTENSION

    if any(name in CLI_MARKERS for name in dep_names):
        return ProjectType.CLI_TOOL

    if any(name in API_FRAMEWORKS for name in dep_names):
        return ProjectType.API_SERVER

    has_web_framework = any(fw in name for fw in WEB_FRAMEWORKS for name in dep_names)
    has_components = any("components" in p.pattern for p in file_patterns)
    if has_web_framework or has_components:
        return ProjectType.WEB_APP

    has_api_routes = any(
        "routes" in p.pattern or "api" in p.pattern for p in file_patterns
    )
    if dependencies and not has_api_routes:
        return ProjectType.LIBRARY

    return ProjectType.UNKNOWN
