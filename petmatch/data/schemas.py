"""Pydantic models for animal reports, match candidates and API payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class ReportStatus(str, Enum):
    """Mutually exclusive status of an animal report."""

    LOST = "Lost"
    FOUND = "Found"
    SIGHTED = "Sighted"
    FOR_ADOPTION = "ForAdoption"
    REUNITED = "Reunited"


class Species(str, Enum):
    """Animal species; kNN candidates must share it with the draft."""

    DOG = "Dog"
    CAT = "Cat"
    OTHER = "Other"


class Size(str, Enum):
    """Optional size category. Not part of the embedding text."""

    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"


class DraftReport(BaseModel):
    """A not-yet-persisted animal report going through submission.

    Required classification fields are validated by the submission form
    before a draft ever reaches the matcher.
    """

    user_id: str = Field(description="Id of the reporting user")
    status: ReportStatus
    name: str = Field(default="Unknown", description="Pet name if known")
    species: Species
    breed: str = Field(description="Free-text breed, e.g. 'Labrador'")
    color: str = Field(description="Free-text color, e.g. 'Black'")
    size: Size | None = None
    description: str = Field(default="", description="Free-text narrative")
    location: str = Field(default="", description="'Neighborhood, City, Area'")
    image_urls: list[str] = Field(default_factory=list)
    create_alert: bool = Field(
        default=False,
        description="Create a saved-search alert after publishing (Lost only)",
    )


class AnimalReport(DraftReport):
    """A persisted animal report."""

    report_id: str = Field(description="Unique id assigned at persistence time")
    embedding: list[float] | None = Field(
        default=None,
        description="Text-profile embedding; null when unavailable",
    )
    created_at: datetime
    expires_at: datetime

    @field_validator("embedding")
    @classmethod
    def _empty_embedding_is_null(cls, value: list[float] | None) -> list[float] | None:
        return value or None


class ReportUpdate(BaseModel):
    """Partial edit of a persisted report. Unset fields are left unchanged."""

    status: ReportStatus | None = None
    name: str | None = None
    species: Species | None = None
    breed: str | None = None
    color: str | None = None
    size: Size | None = None
    description: str | None = None
    location: str | None = None
    image_urls: list[str] | None = None


class SimilarityRow(BaseModel):
    """One raw hit returned by the vector similarity index."""

    report_id: str
    status: ReportStatus
    species: Species
    name: str = "Unknown"
    description: str = ""
    image_urls: list[str] = Field(default_factory=list)
    similarity: float = Field(ge=0.0, le=1.0, description="Normalized similarity")


class MatchCandidate(BaseModel):
    """A ranked reference to an existing report, shown before publishing."""

    report_id: str
    status: ReportStatus
    species: Species
    name: str = "Unknown"
    description: str = Field(default="", description="Narrative excerpt")
    image_urls: list[str] = Field(default_factory=list)
    score: int = Field(ge=0, le=100, description="Similarity percentage")
    explanation: str = Field(default="", description="Human-readable match explanation")


class SubmissionResponse(BaseModel):
    """State of a submission attempt returned to the UI."""

    attempt_id: str
    state: str
    report_id: str | None = None
    selected_report_id: str | None = None
    candidates: list[MatchCandidate] = Field(default_factory=list)


class SelectCandidateRequest(BaseModel):
    report_id: str


class MatchingSettings(BaseModel):
    enabled: bool
