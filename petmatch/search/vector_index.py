"""Filtered kNN similarity search over persisted animal reports."""

from __future__ import annotations

import logging

from elasticsearch import Elasticsearch

from petmatch.data.schemas import ReportStatus, SimilarityRow, Species

logger = logging.getLogger(__name__)


class VectorIndex:
    """Approximate nearest-neighbor search filtered by status and species.

    Each call searches a single status; callers needing several statuses
    issue one call per status. The similarity threshold is handed to
    Elasticsearch so rows below it never leave the server.

    Args:
        es_client: Connected Elasticsearch client.
        index_name: Report index to search.
        num_candidates: Candidate pool size for approximate kNN.
    """

    def __init__(
        self,
        es_client: Elasticsearch,
        index_name: str = "animal_reports",
        num_candidates: int = 50,
    ) -> None:
        self.es = es_client
        self.index_name = index_name
        self.num_candidates = num_candidates

    def search(
        self,
        query_vector: list[float],
        status: ReportStatus,
        species: Species,
        threshold: float = 0.70,
        top_k: int = 5,
    ) -> list[SimilarityRow]:
        """Return up to *top_k* reports most similar to *query_vector*.

        Args:
            query_vector: Non-empty embedding of the query profile.
            status: Only reports with this status are searched.
            species: Only reports of this species are searched.
            threshold: Minimum cosine similarity, enforced server-side.
            top_k: Maximum number of rows.

        Returns:
            Rows in the index's relevance order.

        Raises:
            ValueError: If *query_vector* is empty.
        """
        if not query_vector:
            raise ValueError("query_vector must be a non-empty vector")

        body = _build_match_query(
            query_vector,
            status=status,
            species=species,
            threshold=threshold,
            k=top_k,
            num_candidates=max(self.num_candidates, top_k),
        )
        resp = self.es.search(index=self.index_name, body=body)
        rows = _parse_hits(resp["hits"]["hits"])
        logger.debug(
            "kNN search status=%s species=%s returned %d rows",
            status.value,
            species.value,
            len(rows),
        )
        return rows


def _build_match_query(
    query_vector: list[float],
    status: ReportStatus,
    species: Species,
    threshold: float,
    k: int = 5,
    num_candidates: int = 50,
) -> dict:
    """Build an ES kNN query filtered on status and species.

    Returns:
        Elasticsearch query body.
    """
    return {
        "size": k,
        "knn": {
            "field": "embedding",
            "query_vector": [float(v) for v in query_vector],
            "k": k,
            "num_candidates": num_candidates,
            "similarity": threshold,
            "filter": [
                {"term": {"status": status.value}},
                {"term": {"species": species.value}},
            ],
        },
        "_source": {"excludes": ["embedding"]},
    }


def _score_to_similarity(score: float) -> float:
    """Convert an ES cosine ``_score`` of ``(1 + cos) / 2`` back to cosine in [0, 1]."""
    return min(max(2.0 * score - 1.0, 0.0), 1.0)


def _parse_hits(hits: list[dict]) -> list[SimilarityRow]:
    """Convert Elasticsearch hits to SimilarityRow objects."""
    rows = []
    for hit in hits:
        source = hit["_source"]
        rows.append(
            SimilarityRow(
                report_id=source.get("report_id") or hit["_id"],
                status=source["status"],
                species=source["species"],
                name=source.get("name") or "Unknown",
                description=source.get("description") or "",
                image_urls=source.get("image_urls") or [],
                similarity=_score_to_similarity(hit["_score"]),
            )
        )
    return rows
