"""Submission workflow that pauses for confirmation when matches exist.

A submission attempt moves DRAFT -> MATCH_CHECK, then either straight to
PERSISTING -> DONE, or to AWAITING_CONFIRMATION when candidates exist.
From there the user publishes anyway (PERSISTING -> DONE) or picks an
existing report (DONE, nothing written).

Awaiting attempts wait indefinitely for the user; abandoning one simply
discards it, and nothing has been written at that point.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum

from petmatch.data.schemas import AnimalReport, DraftReport, MatchCandidate
from petmatch.embeddings.generator import build_embedding_text
from petmatch.matching.matcher import MATCHABLE_STATUSES, MatchResult, PetMatcher
from petmatch.submission.store import ReportStore
from petmatch.submission.tasks import PostCommitTask, run_post_commit_tasks

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    DRAFT = "draft"
    MATCH_CHECK = "match_check"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    PERSISTING = "persisting"
    DONE = "done"


class AttemptNotFoundError(KeyError):
    """Raised for an unknown, abandoned or already resolved attempt id."""


class InvalidTransitionError(RuntimeError):
    """Raised when an attempt is not in the state an action requires."""


class UnknownCandidateError(ValueError):
    """Raised when a selected report id was not offered as a candidate."""


@dataclass
class SubmissionAttempt:
    draft: DraftReport
    attempt_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    state: GateState = GateState.DRAFT
    candidates: list[MatchCandidate] = field(default_factory=list)
    embedding: list[float] | None = None
    embedding_attempted: bool = False
    report: AnimalReport | None = None
    selected_report_id: str | None = None


class SubmissionGate:
    """Decide whether a draft is published at once or held for confirmation.

    Args:
        matcher: Matching orchestrator.
        store: Report persistence.
        post_commit_tasks: Side effects run in order after each publish.
    """

    def __init__(
        self,
        matcher: PetMatcher,
        store: ReportStore,
        post_commit_tasks: list[PostCommitTask] | None = None,
    ) -> None:
        self.matcher = matcher
        self.store = store
        self.post_commit_tasks = post_commit_tasks or []
        self._pending: dict[str, SubmissionAttempt] = {}
        self._lock = threading.Lock()

    def submit(self, draft: DraftReport) -> SubmissionAttempt:
        """Run the match check and either publish or hold the draft."""
        attempt = SubmissionAttempt(draft=draft)
        attempt.state = GateState.MATCH_CHECK

        if self.matcher.is_enabled() and draft.status in MATCHABLE_STATUSES:
            result = self._check_matches(draft)
            attempt.embedding = result.embedding
            attempt.embedding_attempted = result.embedding_attempted
            if result.candidates:
                attempt.candidates = result.candidates
                attempt.state = GateState.AWAITING_CONFIRMATION
                with self._lock:
                    self._pending[attempt.attempt_id] = attempt
                logger.info(
                    "Attempt %s awaiting confirmation with %d candidates",
                    attempt.attempt_id,
                    len(attempt.candidates),
                )
                return attempt

        return self._persist(attempt)

    def get_attempt(self, attempt_id: str) -> SubmissionAttempt:
        with self._lock:
            attempt = self._pending.get(attempt_id)
        if attempt is None:
            raise AttemptNotFoundError(attempt_id)
        return attempt

    def publish_anyway(self, attempt_id: str) -> SubmissionAttempt:
        """Publish the held draft, reusing the embedding computed for matching.

        The attempt stays pending until the report is written. If writing
        fails it goes back to awaiting confirmation so the user can retry.
        """
        with self._lock:
            attempt = self._claim(attempt_id)
            attempt.state = GateState.PERSISTING

        try:
            self._persist(attempt)
        except Exception:
            with self._lock:
                attempt.state = GateState.AWAITING_CONFIRMATION
            logger.warning("Publishing attempt %s failed; kept for retry", attempt_id)
            raise

        with self._lock:
            self._pending.pop(attempt_id, None)
        return attempt

    def select_candidate(self, attempt_id: str, report_id: str) -> SubmissionAttempt:
        """Drop the draft in favour of an existing report. Nothing is written."""
        attempt = self.get_attempt(attempt_id)
        if report_id not in {c.report_id for c in attempt.candidates}:
            raise UnknownCandidateError(report_id)
        attempt = self._take(attempt_id)
        attempt.selected_report_id = report_id
        attempt.state = GateState.DONE
        logger.info("Attempt %s resolved to existing report %s", attempt_id, report_id)
        return attempt

    def abandon(self, attempt_id: str) -> None:
        self._take(attempt_id)
        logger.info("Attempt %s abandoned", attempt_id)

    def _check_matches(self, draft: DraftReport) -> MatchResult:
        try:
            return self.matcher.match_draft(draft)
        except Exception:
            logger.exception("Match check failed, publishing without confirmation")
            return MatchResult(embedding_attempted=True)

    def _claim(self, attempt_id: str) -> SubmissionAttempt:
        # Caller holds self._lock.
        attempt = self._pending.get(attempt_id)
        if attempt is None:
            raise AttemptNotFoundError(attempt_id)
        if attempt.state is not GateState.AWAITING_CONFIRMATION:
            raise InvalidTransitionError(f"Attempt {attempt_id} is {attempt.state.value}")
        return attempt

    def _take(self, attempt_id: str) -> SubmissionAttempt:
        with self._lock:
            attempt = self._claim(attempt_id)
            del self._pending[attempt_id]
        return attempt

    def _persist(self, attempt: SubmissionAttempt) -> SubmissionAttempt:
        attempt.state = GateState.PERSISTING

        embedding = attempt.embedding
        if embedding is None and not attempt.embedding_attempted and self.matcher.is_enabled():
            # Reports that skip matching (e.g. adoptions) are still embedded.
            embedding = self.matcher.embedder.generate(build_embedding_text(attempt.draft))

        attempt.report = self.store.create_report(attempt.draft, embedding)
        failed = run_post_commit_tasks(self.post_commit_tasks, attempt.report)
        if failed:
            logger.warning(
                "Report %s published; side effects failed: %s",
                attempt.report.report_id,
                ", ".join(failed),
            )
        attempt.state = GateState.DONE
        return attempt
