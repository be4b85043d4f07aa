"""Rank and deduplicate raw similarity rows into match candidates."""

from __future__ import annotations

from petmatch.data.schemas import MatchCandidate, SimilarityRow


def similarity_to_score(similarity: float) -> int:
    """Map a similarity in [0, 1] to an integer percentage, rounding half up."""
    clamped = min(max(similarity, 0.0), 1.0)
    return int(clamped * 100 + 0.5)


def generate_explanation(score: int) -> str:
    return f"This pet has a {score}% visual and descriptive similarity."


def excerpt(text: str, length: int = 160) -> str:
    """Trim *text* to at most *length* characters, ending on a word boundary."""
    text = " ".join(text.split())
    if len(text) <= length:
        return text
    cut = text[: max(length - 3, 0)].rsplit(" ", 1)[0]
    return cut + "..."


def rank(rows: list[SimilarityRow], excerpt_length: int = 160) -> list[MatchCandidate]:
    """Turn raw rows into candidates sorted by score, highest first.

    The sort is stable, so equal scores keep arrival order. A report id
    that shows up more than once keeps only its best-ranked occurrence.

    Args:
        rows: Rows accumulated across the per-status index calls.
        excerpt_length: Maximum length of the description excerpt.

    Returns:
        Ranked list of MatchCandidate objects.
    """
    candidates = []
    for row in rows:
        score = similarity_to_score(row.similarity)
        candidates.append(
            MatchCandidate(
                report_id=row.report_id,
                status=row.status,
                species=row.species,
                name=row.name,
                description=excerpt(row.description, excerpt_length),
                image_urls=row.image_urls,
                score=score,
                explanation=generate_explanation(score),
            )
        )

    seen_ids: set[str] = set()
    ranked: list[MatchCandidate] = []
    for candidate in sorted(candidates, key=lambda c: c.score, reverse=True):
        if candidate.report_id not in seen_ids:
            seen_ids.add(candidate.report_id)
            ranked.append(candidate)
    return ranked
