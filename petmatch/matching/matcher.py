"""Search previously reported animals for likely matches of a new report."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from petmatch.data.schemas import (
    DraftReport,
    MatchCandidate,
    ReportStatus,
    SimilarityRow,
)
from petmatch.embeddings.generator import EmbeddingGenerator, build_embedding_text
from petmatch.flags import MatchingFlag
from petmatch.matching.ranker import rank
from petmatch.search.vector_index import VectorIndex

logger = logging.getLogger(__name__)

# A lost pet is looked for among found and sighted ones, and vice versa.
COMPLEMENTARY_STATUSES: dict[ReportStatus, tuple[ReportStatus, ...]] = {
    ReportStatus.LOST: (ReportStatus.FOUND, ReportStatus.SIGHTED),
    ReportStatus.FOUND: (ReportStatus.LOST,),
    ReportStatus.SIGHTED: (ReportStatus.LOST,),
    ReportStatus.FOR_ADOPTION: (),
    ReportStatus.REUNITED: (),
}

MATCHABLE_STATUSES = frozenset(
    status for status, targets in COMPLEMENTARY_STATUSES.items() if targets
)


def complementary_statuses(status: ReportStatus) -> tuple[ReportStatus, ...]:
    return COMPLEMENTARY_STATUSES[status]


@dataclass
class MatchResult:
    """Outcome of one matching pass.

    ``embedding`` is kept so the report can be persisted without embedding
    the same profile a second time; ``embedding_attempted`` tells the
    caller whether the model was already tried.
    """

    candidates: list[MatchCandidate] = field(default_factory=list)
    embedding: list[float] | None = None
    embedding_attempted: bool = False


class PetMatcher:
    """Find existing reports that may describe the same animal as a draft.

    Args:
        embedder: Embedding generator for the draft profile.
        index: Vector similarity index over persisted reports.
        flag: Runtime matching switch; matching always runs when None.
        threshold: Minimum similarity passed to the index.
        top_k: Maximum rows per complementary status.
        excerpt_length: Description excerpt length of each candidate.
    """

    def __init__(
        self,
        embedder: EmbeddingGenerator,
        index: VectorIndex,
        flag: MatchingFlag | None = None,
        threshold: float = 0.70,
        top_k: int = 5,
        excerpt_length: int = 160,
    ) -> None:
        self.embedder = embedder
        self.index = index
        self.flag = flag
        self.threshold = threshold
        self.top_k = top_k
        self.excerpt_length = excerpt_length

    def is_enabled(self) -> bool:
        return self.flag is None or self.flag.is_enabled()

    def find_matches(self, draft: DraftReport) -> list[MatchCandidate]:
        """Return ranked candidates for *draft*, or an empty list."""
        return self.match_draft(draft).candidates

    def match_draft(self, draft: DraftReport) -> MatchResult:
        """Embed the draft and search each complementary status once.

        Returns early, without calling any collaborator, when matching is
        disabled or the draft's status has no complement. A failed
        embedding skips the search; a failed search for one status only
        drops that status's rows.
        """
        if not self.is_enabled():
            logger.debug("AI matching disabled, skipping")
            return MatchResult()

        targets = complementary_statuses(draft.status)
        if not targets:
            return MatchResult()

        embedding = self.embedder.generate(build_embedding_text(draft))
        if embedding is None:
            logger.info("No embedding for draft, skipping matching")
            return MatchResult(embedding_attempted=True)

        rows: list[SimilarityRow] = []
        for status in targets:
            try:
                rows.extend(
                    self.index.search(
                        embedding,
                        status=status,
                        species=draft.species,
                        threshold=self.threshold,
                        top_k=self.top_k,
                    )
                )
            except Exception:
                logger.exception(
                    "Similarity search failed for status=%s species=%s",
                    status.value,
                    draft.species.value,
                )

        candidates = rank(rows, excerpt_length=self.excerpt_length)
        logger.info(
            "Matching %s %s against %s: %d candidates",
            draft.status.value,
            draft.species.value,
            "/".join(s.value for s in targets),
            len(candidates),
        )
        return MatchResult(
            candidates=candidates,
            embedding=embedding,
            embedding_attempted=True,
        )
