"""Document scoring and ranking against a WorkspaceContext.

Each factor awards its full weight once per distinct matched item, so adding
a matching signal can only raise a document's score. All comparisons are
case-insensitive.
"""

from __future__ import annotations

import logging

from steerdocs.recommend.models import (
    SCORING_WEIGHTS,
    DependencyInfo,
    DocumentMetadata,
    FilePattern,
    FrameworkInfo,
    MatchReason,
    MatchType,
    ScoredDocument,
    WorkspaceContext,
)

logger = logging.getLogger(__name__)


class DocumentMatcher:
    """Scores catalog documents. Stateless."""

    def score_document(
        self, document: DocumentMetadata, context: WorkspaceContext
    ) -> ScoredDocument:
        reasons = [
            reason
            for reason in (
                self._framework_reason(document, context.frameworks),
                self._dependency_reason(document, context.dependencies),
                self._file_pattern_reason(document, context.file_patterns),
                self._language_reason(document, context.languages),
            )
            if reason is not None
        ]

        return ScoredDocument(
            document=document,
            score=sum(r.weight for r in reasons),
            reasons=reasons,
            is_installed=document.name in context.installed_docs,
        )

    def rank_documents(
        self, documents: list[DocumentMetadata], context: WorkspaceContext
    ) -> list[ScoredDocument]:
        """Score, drop documents with no match, sort by score desc then name."""
        scored = [self.score_document(doc, context) for doc in documents]
        matched = [s for s in scored if s.reasons]
        matched.sort(key=lambda s: (-s.score, s.document.name))

        logger.debug(
            f"Ranked {len(matched)} of {len(documents)} documents; top: "
            f"{[(s.document.name, s.score) for s in matched[:3]]}"
        )
        return matched

    def _framework_reason(
        self, document: DocumentMetadata, frameworks: list[FrameworkInfo]
    ) -> MatchReason | None:
        if document.tags is None or not frameworks:
            return None

        tags = [tag.lower() for tag in _unique(document.tags)]
        matched = [
            fw.name
            for fw in frameworks
            if any(tag == fw.name.lower() or fw.name.lower() in tag for tag in tags)
        ]
        if not matched:
            return None

        plural = "s" if len(matched) > 1 else ""
        return _reason(
            MatchType.FRAMEWORK,
            f"Matches your {', '.join(matched)} framework{plural}",
            matched,
        )

    def _dependency_reason(
        self, document: DocumentMetadata, dependencies: list[DependencyInfo]
    ) -> MatchReason | None:
        if document.required_dependencies is None or not dependencies:
            return None

        dep_names = [dep.name.lower() for dep in dependencies if dep.name]
        matched = [
            required
            for required in _unique(document.required_dependencies)
            if any(_overlaps(required.lower(), name) for name in dep_names)
        ]
        if not matched:
            return None

        return _reason(
            MatchType.DEPENDENCY,
            f"Uses {', '.join(matched)} from your dependencies",
            matched,
        )

    def _file_pattern_reason(
        self, document: DocumentMetadata, patterns: list[FilePattern]
    ) -> MatchReason | None:
        if document.file_patterns is None or not patterns:
            return None

        workspace_patterns = [p.pattern.lower() for p in patterns]
        matched = [
            doc_pattern
            for doc_pattern in _unique(document.file_patterns)
            if any(_overlaps(doc_pattern.lower(), wp) for wp in workspace_patterns)
        ]
        if not matched:
            return None

        return _reason(
            MatchType.FILE_PATTERN,
            f"Matches your project structure ({', '.join(matched)})",
            matched,
        )

    def _language_reason(
        self, document: DocumentMetadata, languages: set[str]
    ) -> MatchReason | None:
        if document.tags is None or not languages:
            return None

        normalized = {lang.lower() for lang in languages}
        matched = [tag for tag in _unique(document.tags) if tag.lower() in normalized]
        if not matched:
            return None

        return _reason(
            MatchType.LANGUAGE,
            f"Relevant for {', '.join(matched)} development",
            matched,
        )


def _reason(match_type: MatchType, description: str, matched: list[str]) -> MatchReason:
    return MatchReason(
        type=match_type,
        description=description,
        weight=SCORING_WEIGHTS[match_type] * len(matched),
        details=matched,
    )


def _overlaps(a: str, b: str) -> bool:
    return a == b or a in b or b in a


def _unique(values: list[str]) -> list[str]:
    """Drop blanks and case-insensitive duplicates, keeping first spelling and order."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        key = value.strip().lower()
        if key and key not in seen:
            seen.add(key)
            result.append(value)
    return result
