"""Activity log for MCP tool calls.

Every tool call an AI agent makes is appended to a JSONL file together with
the workspace it ran against and what the agent was told: the ranked
documents and their scores for ``recommend_documents``, or the detected
project type and frameworks for ``analyze_workspace``. ``steerdocs activity``
reads it back.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path

from steerdocs.recommend.models import ScoredDocument, WorkspaceContext

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = Path("steerdocs-activity.jsonl")
MAX_LOGGED_RECOMMENDATIONS = 10


@dataclass
class LoggedRecommendation:
    name: str
    score: int
    installed: bool = False


@dataclass
class ActivityEntry:
    timestamp: str
    tool_name: str
    workspace: str | None = None
    arguments: dict = field(default_factory=dict)
    # None when the tool doesn't rank documents, [] when nothing matched
    recommendations: list[LoggedRecommendation] | None = None
    project_type: str | None = None
    frameworks: list[str] = field(default_factory=list)
    error: str | None = None
    duration_ms: int = 0

    def summary(self) -> str:
        """One-line description of what the call returned."""
        if self.error:
            return f"error: {self.error}"
        if self.recommendations is not None:
            if not self.recommendations:
                return "no recommendations"
            return ", ".join(f"{r.name} ({r.score})" for r in self.recommendations)
        if self.project_type:
            if self.frameworks:
                return f"{self.project_type}: {', '.join(self.frameworks)}"
            return self.project_type
        return ""

    @classmethod
    def from_dict(cls, data: dict) -> ActivityEntry:
        recommendations = data.get("recommendations")
        if recommendations is not None:
            recommendations = [
                LoggedRecommendation(
                    name=r["name"],
                    score=int(r.get("score", 0)),
                    installed=bool(r.get("installed", False)),
                )
                for r in recommendations
            ]
        return cls(
            timestamp=data.get("timestamp", ""),
            tool_name=data.get("tool_name", ""),
            workspace=data.get("workspace"),
            arguments=data.get("arguments") or {},
            recommendations=recommendations,
            project_type=data.get("project_type"),
            frameworks=list(data.get("frameworks") or []),
            error=data.get("error"),
            duration_ms=int(data.get("duration_ms", 0)),
        )


def recommendation_outcome(results: list[ScoredDocument]) -> dict:
    return {
        "recommendations": [
            LoggedRecommendation(name=r.document.name, score=r.score, installed=r.is_installed)
            for r in results[:MAX_LOGGED_RECOMMENDATIONS]
        ],
    }


def context_outcome(context: WorkspaceContext) -> dict:
    return {
        "project_type": context.project_type.value,
        "frameworks": [fw.name for fw in context.frameworks],
    }


def _resolve_log_path() -> Path:
    env_path = os.getenv("STEERDOCS_LOG_PATH")
    if env_path:
        return Path(env_path)
    return DEFAULT_LOG_PATH


def _same_workspace(a: str | None, b: str) -> bool:
    return a is not None and os.path.normpath(a) == os.path.normpath(b)


def log_tool_call(
    tool_name: str,
    arguments: dict,
    workspace: str | None = None,
    outcome: dict | None = None,
    error: str | None = None,
    duration_ms: int = 0,
) -> None:
    """Append a tool call to the activity log.

    ``outcome`` comes from recommendation_outcome() or context_outcome().
    Write failures are logged and never reach the MCP client.
    """
    entry = ActivityEntry(
        timestamp=datetime.now().isoformat(),
        tool_name=tool_name,
        workspace=workspace,
        arguments=arguments,
        error=error,
        duration_ms=duration_ms,
        **(outcome or {}),
    )
    path = _resolve_log_path()
    try:
        line = json.dumps(asdict(entry), default=str)
        with open(path, "a") as f:
            f.write(line + "\n")
    except (OSError, TypeError, ValueError) as e:
        logger.warning(f"Could not write activity log {path}: {e}")


def read_activity_log(
    limit: int = 20,
    tool_name: str | None = None,
    workspace: str | None = None,
    log_path: Path | None = None,
) -> list[ActivityEntry]:
    """Read recent activity log entries, most recent first."""
    path = log_path or _resolve_log_path()
    if not path.exists():
        return []

    entries: list[ActivityEntry] = []
    for line in path.read_text().splitlines():
        if not line.strip():
            continue
        try:
            entry = ActivityEntry.from_dict(json.loads(line))
        except (ValueError, TypeError, KeyError, AttributeError):
            logger.debug(f"Skipping unreadable activity line in {path}")
            continue

        if tool_name and entry.tool_name != tool_name:
            continue
        if workspace and not _same_workspace(entry.workspace, workspace):
            continue

        entries.append(entry)

    entries.reverse()
    return entries[:limit]
