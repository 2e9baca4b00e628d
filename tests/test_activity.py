"""Tests for steerdocs.activity: logging and reading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from steerdocs.activity import (
    MAX_LOGGED_RECOMMENDATIONS,
    ActivityEntry,
    LoggedRecommendation,
    context_outcome,
    log_tool_call,
    read_activity_log,
    recommendation_outcome,
)
from steerdocs.recommend.models import DocumentMetadata, ScoredDocument


def _scored(name: str, score: int, installed: bool = False) -> ScoredDocument:
    doc = DocumentMetadata(name=name, path=f"frameworks/{name}", category="frameworks")
    return ScoredDocument(document=doc, score=score, is_installed=installed)


def _write_entries(log_path: Path, tools: list[str], workspace: str = "/work/webapp") -> None:
    with open(log_path, "a") as f:
        for i, tool in enumerate(tools):
            f.write(json.dumps({
                "timestamp": f"2024-01-01T00:00:{i:02d}",
                "tool_name": tool,
                "workspace": workspace,
                "arguments": {},
                "recommendations": [{"name": f"doc-{i}.md", "score": i * 10, "installed": False}],
                "error": None,
                "duration_ms": i * 10,
            }) + "\n")


@pytest.fixture
def log_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "activity.jsonl"
    monkeypatch.setenv("STEERDOCS_LOG_PATH", str(path))
    return path


class TestOutcomes:
    def test_recommendation_outcome(self):
        outcome = recommendation_outcome([_scored("react.md", 30), _scored("jest.md", 20, True)])
        assert outcome == {"recommendations": [
            LoggedRecommendation(name="react.md", score=30, installed=False),
            LoggedRecommendation(name="jest.md", score=20, installed=True),
        ]}

    def test_recommendation_outcome_is_capped(self):
        results = [_scored(f"doc-{i}.md", 100 - i) for i in range(MAX_LOGGED_RECOMMENDATIONS + 5)]
        assert len(recommendation_outcome(results)["recommendations"]) == MAX_LOGGED_RECOMMENDATIONS

    def test_context_outcome(self, sample_context):
        assert context_outcome(sample_context) == {"project_type": "web-app", "frameworks": ["react"]}


class TestLogToolCall:
    def test_records_ranked_documents(self, log_path: Path):
        log_tool_call(
            "recommend_documents",
            {"max_results": 3},
            workspace="/work/webapp",
            outcome=recommendation_outcome([_scored("react.md", 30)]),
            duration_ms=100,
        )
        entry = json.loads(log_path.read_text().strip())
        assert entry["tool_name"] == "recommend_documents"
        assert entry["workspace"] == "/work/webapp"
        assert entry["arguments"] == {"max_results": 3}
        assert entry["recommendations"] == [{"name": "react.md", "score": 30, "installed": False}]
        assert entry["project_type"] is None
        assert entry["duration_ms"] == 100
        assert entry["error"] is None

    def test_records_project_profile(self, log_path: Path, sample_context):
        log_tool_call("analyze_workspace", {}, outcome=context_outcome(sample_context))
        entry = json.loads(log_path.read_text().strip())
        assert entry["project_type"] == "web-app"
        assert entry["frameworks"] == ["react"]
        assert entry["recommendations"] is None

    def test_logs_error(self, log_path: Path):
        log_tool_call("analyze_workspace", {}, error="[NO_WORKSPACE] No workspace", duration_ms=5)
        entry = json.loads(log_path.read_text().strip())
        assert entry["error"] == "[NO_WORKSPACE] No workspace"
        assert entry["workspace"] is None

    def test_unwritable_path_logs_warning(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ):
        monkeypatch.setenv("STEERDOCS_LOG_PATH", str(tmp_path / "missing" / "dir" / "log.jsonl"))
        log_tool_call("recommend_documents", {})
        assert "Could not write activity log" in caplog.text


class TestActivityEntry:
    def test_summary_lists_scores(self):
        entry = ActivityEntry(
            timestamp="t",
            tool_name="recommend_documents",
            recommendations=[
                LoggedRecommendation("react.md", 30),
                LoggedRecommendation("jest.md", 20, installed=True),
            ],
        )
        assert entry.summary() == "react.md (30), jest.md (20)"

    def test_summary_no_matches(self):
        entry = ActivityEntry(timestamp="t", tool_name="recommend_documents", recommendations=[])
        assert entry.summary() == "no recommendations"

    def test_summary_profile(self):
        entry = ActivityEntry(
            timestamp="t", tool_name="analyze_workspace", project_type="web-app", frameworks=["react"]
        )
        assert entry.summary() == "web-app: react"
        entry.frameworks = []
        assert entry.summary() == "web-app"

    def test_summary_error_wins(self):
        entry = ActivityEntry(
            timestamp="t", tool_name="recommend_documents", recommendations=[], error="[FETCH_FAILED] down"
        )
        assert entry.summary() == "error: [FETCH_FAILED] down"


class TestReadActivityLog:
    def test_read_missing(self, tmp_path: Path):
        assert read_activity_log(log_path=tmp_path / "missing.jsonl") == []

    def test_most_recent_first(self, tmp_path: Path):
        log_path = tmp_path / "activity.jsonl"
        _write_entries(log_path, ["recommend_documents"] * 5)
        entries = read_activity_log(log_path=log_path)
        assert len(entries) == 5
        assert entries[0].recommendations == [LoggedRecommendation("doc-4.md", 40)]

    def test_round_trips_logged_call(self, log_path: Path):
        log_tool_call(
            "recommend_documents",
            {},
            workspace="/work/webapp",
            outcome=recommendation_outcome([_scored("react.md", 30)]),
        )
        [entry] = read_activity_log()
        assert entry.workspace == "/work/webapp"
        assert entry.summary() == "react.md (30)"

    def test_filter_by_tool_name(self, tmp_path: Path):
        log_path = tmp_path / "activity.jsonl"
        _write_entries(log_path, ["recommend_documents", "analyze_workspace", "recommend_documents"])
        entries = read_activity_log(tool_name="analyze_workspace", log_path=log_path)
        assert len(entries) == 1

    def test_filter_by_workspace(self, tmp_path: Path):
        log_path = tmp_path / "activity.jsonl"
        _write_entries(log_path, ["recommend_documents"] * 2, workspace="/work/a")
        _write_entries(log_path, ["recommend_documents"], workspace="/work/b")
        assert len(read_activity_log(workspace="/work/a/", log_path=log_path)) == 2
        assert len(read_activity_log(workspace="/work/b", log_path=log_path)) == 1

    def test_respects_limit(self, tmp_path: Path):
        log_path = tmp_path / "activity.jsonl"
        _write_entries(log_path, ["recommend_documents"] * 10)
        assert len(read_activity_log(limit=3, log_path=log_path)) == 3

    def test_skips_corrupt_lines(self, tmp_path: Path):
        log_path = tmp_path / "activity.jsonl"
        _write_entries(log_path, ["analyze_workspace"])
        with open(log_path, "a") as f:
            f.write("{truncated\n\n")
            f.write('{"tool_name": "recommend_documents", "recommendations": [{"score": 3}]}\n')
            f.write("[1, 2]\n")
        assert len(read_activity_log(log_path=log_path)) == 1
