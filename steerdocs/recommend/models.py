"""Core data models for steering document recommendations."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum


class ProjectType(str, Enum):
    WEB_APP = "web-app"
    LIBRARY = "library"
    CLI_TOOL = "cli-tool"
    VSCODE_EXTENSION = "vscode-extension"
    API_SERVER = "api-server"
    UNKNOWN = "unknown"


class DependencyCategory(str, Enum):
    FRAMEWORK = "framework"
    TESTING = "testing"
    BUILD = "build"
    UTILITY = "utility"


class MatchType(str, Enum):
    FRAMEWORK = "framework"
    DEPENDENCY = "dependency"
    FILE_PATTERN = "file-pattern"
    LANGUAGE = "language"


# Points awarded per distinct match of each factor
SCORING_WEIGHTS: dict[MatchType, int] = {
    MatchType.FRAMEWORK: 30,
    MatchType.DEPENDENCY: 20,
    MatchType.FILE_PATTERN: 15,
    MatchType.LANGUAGE: 10,
}


@dataclass
class FrameworkInfo:
    name: str  # e.g. "react", "next.js"
    version: str  # raw manifest string, not parsed
    confidence: float  # 0..1, how specific the detection pattern was


@dataclass
class DependencyInfo:
    name: str
    version: str
    is_dev: bool = False
    category: DependencyCategory = DependencyCategory.UTILITY


@dataclass
class FilePattern:
    pattern: str  # e.g. "components/**/*"
    count: int
    significance: float  # min(count / N, 1.0)


@dataclass
class WorkspaceContext:
    languages: set[str] = field(default_factory=set)
    frameworks: list[FrameworkInfo] = field(default_factory=list)
    dependencies: list[DependencyInfo] = field(default_factory=list)
    file_patterns: list[FilePattern] = field(default_factory=list)
    has_tests: bool = False
    project_type: ProjectType = ProjectType.UNKNOWN
    installed_docs: list[str] = field(default_factory=list)  # set by the caller

    def to_dict(self) -> dict:
        data = asdict(self)
        data["languages"] = sorted(self.languages)
        return data


@dataclass
class DocumentMetadata:
    """A catalog entry. None means the field was absent, [] means declared empty."""

    name: str  # file name, e.g. "react.md"
    path: str  # path within the catalog
    category: str
    description: str = ""
    version: str = "1.0.0"
    sha: str = ""
    download_url: str = ""
    tags: list[str] | None = None
    required_dependencies: list[str] | None = None
    file_patterns: list[str] | None = None


@dataclass
class MatchReason:
    type: MatchType
    description: str
    weight: int  # points this factor contributed
    details: list[str] = field(default_factory=list)


@dataclass
class ScoredDocument:
    document: DocumentMetadata
    score: int = 0
    reasons: list[MatchReason] = field(default_factory=list)
    is_installed: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RecommendationOptions:
    max_results: int = 10
    include_installed: bool = True
    min_score: int = 10
