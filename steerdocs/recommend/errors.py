"""Typed errors for the recommendation pipeline.

Callers branch on ``RecommendationError.code`` rather than on message text.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    NO_WORKSPACE = "NO_WORKSPACE"
    ANALYSIS_FAILED = "ANALYSIS_FAILED"
    FETCH_FAILED = "FETCH_FAILED"


class RecommendationError(Exception):
    """Raised when a recommendation request cannot be completed."""

    def __init__(self, code: ErrorCode, message: str, details: object = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


def no_workspace() -> RecommendationError:
    return RecommendationError(
        ErrorCode.NO_WORKSPACE,
        "No workspace is currently open. Open a project folder to get recommendations.",
    )
