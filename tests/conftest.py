"""Shared test fixtures for the Pet Match test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from petmatch.data.schemas import (
    AnimalReport,
    DraftReport,
    ReportStatus,
    SimilarityRow,
    Species,
)


@pytest.fixture
def sample_draft() -> DraftReport:
    """A lost black Labrador, as entered in the report form."""
    return DraftReport(
        user_id="user-1",
        status=ReportStatus.LOST,
        name="Rocky",
        species=Species.DOG,
        breed="Labrador",
        color="Black",
        description="friendly, limps on left leg",
        location="Pocitos, Montevideo, Montevideo",
        image_urls=["https://img.example/rocky.jpg"],
    )


@pytest.fixture
def sample_report(sample_draft: DraftReport, fake_embedding: list[float]) -> AnimalReport:
    """A persisted Found report."""
    created = datetime(2026, 1, 1, tzinfo=timezone.utc)
    return AnimalReport(
        **sample_draft.model_dump(exclude={"status"}),
        status=ReportStatus.FOUND,
        report_id="rep-100",
        embedding=fake_embedding,
        created_at=created,
        expires_at=datetime(2026, 3, 2, tzinfo=timezone.utc),
    )


def make_row(
    report_id: str,
    similarity: float,
    status: ReportStatus = ReportStatus.FOUND,
    species: Species = Species.DOG,
) -> SimilarityRow:
    return SimilarityRow(
        report_id=report_id,
        status=status,
        species=species,
        name=f"Pet {report_id}",
        description="Black dog found near the park",
        image_urls=[f"https://img.example/{report_id}.jpg"],
        similarity=similarity,
    )


@pytest.fixture
def row_factory():
    """Build SimilarityRow objects with sensible defaults."""
    return make_row


@pytest.fixture
def mock_es_client() -> MagicMock:
    """Create a mock Elasticsearch client."""
    mock = MagicMock()
    mock.ping.return_value = True
    mock.indices.exists.return_value = False
    mock.indices.create.return_value = {"acknowledged": True}
    mock.search.return_value = {"hits": {"hits": []}}
    return mock


@pytest.fixture
def fake_embedding() -> list[float]:
    """Create a fake 512-dim embedding vector."""
    return [0.01] * 512


@pytest.fixture
def mock_embedder(fake_embedding: list[float]) -> MagicMock:
    """An available embedding generator returning ``fake_embedding``."""
    mock = MagicMock()
    mock.is_available.return_value = True
    mock.generate.return_value = fake_embedding
    return mock


@pytest.fixture
def mock_index() -> MagicMock:
    mock = MagicMock()
    mock.search.return_value = []
    return mock
