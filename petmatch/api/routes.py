"""FastAPI routes for matching, report submission and settings."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from petmatch.data.schemas import (
    AnimalReport,
    DraftReport,
    MatchCandidate,
    MatchingSettings,
    ReportUpdate,
    SelectCandidateRequest,
    SubmissionResponse,
)
from petmatch.submission.gate import (
    AttemptNotFoundError,
    InvalidTransitionError,
    SubmissionAttempt,
    UnknownCandidateError,
)
from petmatch.submission.store import ReportNotFoundError

router = APIRouter()


def _to_response(attempt: SubmissionAttempt) -> SubmissionResponse:
    return SubmissionResponse(
        attempt_id=attempt.attempt_id,
        state=attempt.state.value,
        report_id=attempt.report.report_id if attempt.report else None,
        selected_report_id=attempt.selected_report_id,
        candidates=attempt.candidates,
    )


def _public(report: AnimalReport) -> dict:
    return report.model_dump(mode="json", exclude={"embedding"})


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint for monitoring.

    Returns:
        Dict with system health status.
    """
    es = request.app.state.es_client
    es_healthy = es.ping()
    embedder_ready = request.app.state.embedder.is_available()
    return {
        "status": "healthy" if es_healthy else "degraded",
        "elasticsearch": "connected" if es_healthy else "disconnected",
        "embedding_model": "loaded" if embedder_ready else "unavailable",
        "matching_enabled": request.app.state.matching_flag.is_enabled(),
    }


@router.post("/api/matches", response_model=list[MatchCandidate])
async def find_matches(request: Request, draft: DraftReport) -> list[MatchCandidate]:
    """Ranked candidates for a draft, without submitting it."""
    return request.app.state.matcher.find_matches(draft)


@router.post("/api/reports", response_model=SubmissionResponse)
async def submit_report(request: Request, draft: DraftReport) -> SubmissionResponse:
    """Submit a draft; holds it for confirmation when candidates are found."""
    attempt = request.app.state.gate.submit(draft)
    return _to_response(attempt)


@router.post("/api/submissions/{attempt_id}/publish", response_model=SubmissionResponse)
async def publish_anyway(request: Request, attempt_id: str) -> SubmissionResponse:
    try:
        attempt = request.app.state.gate.publish_anyway(attempt_id)
    except AttemptNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Submission not found") from exc
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _to_response(attempt)


@router.post("/api/submissions/{attempt_id}/select", response_model=SubmissionResponse)
async def select_candidate(
    request: Request, attempt_id: str, body: SelectCandidateRequest
) -> SubmissionResponse:
    """Abandon the draft and point the user at an existing report."""
    try:
        attempt = request.app.state.gate.select_candidate(attempt_id, body.report_id)
    except AttemptNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Submission not found") from exc
    except UnknownCandidateError as exc:
        raise HTTPException(
            status_code=422, detail="Report is not a candidate of this submission"
        ) from exc
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _to_response(attempt)


@router.delete("/api/submissions/{attempt_id}", status_code=204)
async def abandon_submission(request: Request, attempt_id: str) -> None:
    try:
        request.app.state.gate.abandon(attempt_id)
    except AttemptNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Submission not found") from exc
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@router.get("/api/reports/{report_id}")
async def get_report(request: Request, report_id: str) -> dict:
    try:
        report = request.app.state.store.get_report(report_id)
    except ReportNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Report not found") from exc
    return _public(report)


@router.patch("/api/reports/{report_id}")
async def update_report(request: Request, report_id: str, changes: ReportUpdate) -> dict:
    """Edit a report. Edits never trigger matching."""
    try:
        report = request.app.state.store.update_report(report_id, changes)
    except ReportNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Report not found") from exc
    return _public(report)


@router.get("/api/settings/matching", response_model=MatchingSettings)
async def get_matching_settings(request: Request) -> MatchingSettings:
    return MatchingSettings(enabled=request.app.state.matching_flag.is_enabled())


@router.put("/api/settings/matching", response_model=MatchingSettings)
async def set_matching_settings(
    request: Request, settings: MatchingSettings
) -> MatchingSettings:
    """Toggle AI matching at runtime."""
    request.app.state.matching_flag.set(settings.enabled)
    return MatchingSettings(enabled=request.app.state.matching_flag.is_enabled())
