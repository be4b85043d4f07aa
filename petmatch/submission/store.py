"""Persistence of animal reports in the Elasticsearch report index."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

from elasticsearch import Elasticsearch, NotFoundError

from petmatch.data.schemas import AnimalReport, DraftReport, ReportUpdate
from petmatch.embeddings.generator import EmbeddingGenerator, build_embedding_text
from petmatch.flags import MatchingFlag

logger = logging.getLogger(__name__)

EMBEDDING_INPUT_FIELDS = frozenset({"species", "breed", "color", "description"})
# Fields an edit may clear; a null for any other field is ignored.
NULLABLE_FIELDS = frozenset({"size"})


class ReportNotFoundError(KeyError):
    """Raised when a report id is not in the index."""


class ReportStore:
    """Create, read and edit animal reports.

    Reports live in the same index the similarity search reads from, so
    a report is matchable as soon as it is written.

    Args:
        es_client: Connected Elasticsearch client.
        index_name: Report index.
        ttl_days: Days until a new report expires.
        embedder: Used to refresh the embedding when an edit changes the profile.
        flag: Runtime matching switch; embeddings are not refreshed while off.
    """

    def __init__(
        self,
        es_client: Elasticsearch,
        index_name: str = "animal_reports",
        ttl_days: int = 60,
        embedder: EmbeddingGenerator | None = None,
        flag: MatchingFlag | None = None,
    ) -> None:
        self.es = es_client
        self.index_name = index_name
        self.ttl_days = ttl_days
        self.embedder = embedder
        self.flag = flag

    def create_report(
        self,
        draft: DraftReport,
        embedding: list[float] | None = None,
        now: datetime | None = None,
    ) -> AnimalReport:
        """Persist *draft* under a fresh id with its embedding (or none)."""
        created_at = now or datetime.now(timezone.utc)
        report = AnimalReport(
            **draft.model_dump(),
            report_id=str(uuid.uuid4()),
            embedding=embedding,
            created_at=created_at,
            expires_at=created_at + timedelta(days=self.ttl_days),
        )
        self._write(report)
        logger.info(
            "Created %s %s report %s (embedding=%s)",
            report.status.value,
            report.species.value,
            report.report_id,
            "yes" if report.embedding else "no",
        )
        return report

    def get_report(self, report_id: str) -> AnimalReport:
        try:
            resp = self.es.get(index=self.index_name, id=report_id)
        except NotFoundError as exc:
            raise ReportNotFoundError(report_id) from exc
        return AnimalReport(**resp["_source"])

    def update_report(self, report_id: str, changes: ReportUpdate) -> AnimalReport:
        """Apply an edit. Matching is never re-run for edits.

        Explicit nulls are ignored except for fields that may be empty.
        When the edit touches the embedding input (species, breed, color or
        description) the embedding is recomputed so the report keeps
        matching accurately. If that fails, the previous embedding stays.
        """
        report = self.get_report(report_id)
        updates = {
            key: value
            for key, value in changes.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        updated = AnimalReport.model_validate({**report.model_dump(), **updates})

        if self._should_refresh_embedding(report, updated, updates):
            embedding = self.embedder.generate(build_embedding_text(updated))
            if embedding is not None:
                updated = updated.model_copy(update={"embedding": embedding})
            else:
                logger.warning("Keeping stale embedding for report %s", report_id)

        self._write(updated)
        logger.info("Updated report %s (%s)", report_id, ", ".join(sorted(updates)))
        return updated

    def _should_refresh_embedding(
        self, before: AnimalReport, after: AnimalReport, updates: dict
    ) -> bool:
        if self.embedder is None or not self.embedder.is_available():
            return False
        if self.flag is not None and not self.flag.is_enabled():
            return False
        if not EMBEDDING_INPUT_FIELDS.intersection(updates):
            return False
        return build_embedding_text(before) != build_embedding_text(after)

    def _write(self, report: AnimalReport) -> None:
        doc = report.model_dump(mode="json", exclude_none=True)
        self.es.index(
            index=self.index_name,
            id=report.report_id,
            document=doc,
            refresh="wait_for",
        )
