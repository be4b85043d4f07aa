"""Tests for petmatch/matching/matcher.py."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from petmatch.data.schemas import DraftReport, ReportStatus, Species
from petmatch.flags import MatchingFlag
from petmatch.matching.matcher import (
    COMPLEMENTARY_STATUSES,
    MATCHABLE_STATUSES,
    PetMatcher,
    complementary_statuses,
)


@pytest.fixture
def matcher(mock_embedder: MagicMock, mock_index: MagicMock) -> PetMatcher:
    return PetMatcher(mock_embedder, mock_index, threshold=0.70, top_k=5)


def _draft(sample_draft: DraftReport, status: ReportStatus) -> DraftReport:
    return sample_draft.model_copy(update={"status": status})


class TestComplementTable:
    """Tests for the fixed status complement table."""

    def test_table_is_total(self) -> None:
        """Every status should have an entry."""
        assert set(COMPLEMENTARY_STATUSES) == set(ReportStatus)

    def test_table_contents(self) -> None:
        assert complementary_statuses(ReportStatus.LOST) == (
            ReportStatus.FOUND,
            ReportStatus.SIGHTED,
        )
        assert complementary_statuses(ReportStatus.FOUND) == (ReportStatus.LOST,)
        assert complementary_statuses(ReportStatus.SIGHTED) == (ReportStatus.LOST,)
        assert complementary_statuses(ReportStatus.FOR_ADOPTION) == ()
        assert complementary_statuses(ReportStatus.REUNITED) == ()

    def test_matchable_statuses(self) -> None:
        assert MATCHABLE_STATUSES == {
            ReportStatus.LOST,
            ReportStatus.FOUND,
            ReportStatus.SIGHTED,
        }


class TestFindMatches:
    """Tests for PetMatcher.find_matches."""

    def test_lost_dog_scenario(
        self, matcher: PetMatcher, sample_draft: DraftReport, row_factory
    ) -> None:
        """Found and sighted hits should merge into one list ordered by score."""
        found_rows = [
            row_factory("f1", 0.81),
            row_factory("f2", 0.95),
            row_factory("f3", 0.72),
        ]
        sighted_rows = [row_factory("s1", 0.88, status=ReportStatus.SIGHTED)]
        matcher.index.search.side_effect = [found_rows, sighted_rows]

        matches = matcher.find_matches(sample_draft)

        assert [m.score for m in matches] == [95, 88, 81, 72]
        assert [m.report_id for m in matches] == ["f2", "s1", "f1", "f3"]

    def test_embedding_text_order(
        self, matcher: PetMatcher, sample_draft: DraftReport
    ) -> None:
        """Embedding input is species, breed, color, description."""
        matcher.find_matches(sample_draft)
        matcher.embedder.generate.assert_called_once_with(
            "Dog Labrador Black friendly, limps on left leg"
        )

    def test_one_search_per_complementary_status(
        self,
        matcher: PetMatcher,
        sample_draft: DraftReport,
        fake_embedding: list[float],
    ) -> None:
        """Lost drafts search Found then Sighted, filtered on species."""
        matcher.find_matches(sample_draft)

        calls = matcher.index.search.call_args_list
        assert [c.kwargs["status"] for c in calls] == [
            ReportStatus.FOUND,
            ReportStatus.SIGHTED,
        ]
        for call in calls:
            assert call.args[0] == fake_embedding
            assert call.kwargs["species"] == Species.DOG
            assert call.kwargs["threshold"] == 0.70
            assert call.kwargs["top_k"] == 5

    @pytest.mark.parametrize(
        "status", [ReportStatus.FOR_ADOPTION, ReportStatus.REUNITED]
    )
    def test_unmatched_status_skips_collaborators(
        self, matcher: PetMatcher, sample_draft: DraftReport, status: ReportStatus
    ) -> None:
        """Adoption and reunited drafts never call the embedder or index."""
        assert matcher.find_matches(_draft(sample_draft, status)) == []
        matcher.embedder.generate.assert_not_called()
        matcher.index.search.assert_not_called()

    def test_missing_embedding_skips_search(
        self, matcher: PetMatcher, sample_draft: DraftReport
    ) -> None:
        """A null embedding short-circuits to no matches."""
        matcher.embedder.generate.return_value = None
        draft = _draft(sample_draft, ReportStatus.FOUND)

        assert matcher.find_matches(draft) == []
        matcher.index.search.assert_not_called()

    def test_partial_index_failure(
        self, matcher: PetMatcher, sample_draft: DraftReport, row_factory
    ) -> None:
        """A failing status search should not drop the other status's rows."""
        matcher.index.search.side_effect = [
            ConnectionError("index down"),
            [row_factory("s1", 0.75, status=ReportStatus.SIGHTED)],
        ]

        matches = matcher.find_matches(sample_draft)

        assert len(matches) == 1
        assert matches[0].report_id == "s1"
        assert matches[0].score == 75

    def test_total_index_failure_is_no_matches(
        self, matcher: PetMatcher, sample_draft: DraftReport
    ) -> None:
        matcher.index.search.side_effect = RuntimeError("boom")
        assert matcher.find_matches(sample_draft) == []
        assert matcher.index.search.call_count == 2

    def test_disabled_flag_skips_all_work(
        self, mock_embedder: MagicMock, mock_index: MagicMock, sample_draft: DraftReport
    ) -> None:
        matcher = PetMatcher(mock_embedder, mock_index, flag=MatchingFlag(False))
        assert matcher.find_matches(sample_draft) == []
        mock_embedder.generate.assert_not_called()
        mock_index.search.assert_not_called()

    def test_same_embedding_same_order(
        self, matcher: PetMatcher, sample_draft: DraftReport, row_factory
    ) -> None:
        """Repeated passes over unchanged data give the same ranking."""
        rows = [row_factory("a", 0.9), row_factory("b", 0.9), row_factory("c", 0.8)]
        matcher.index.search.side_effect = lambda *a, **kw: (
            rows if kw["status"] is ReportStatus.FOUND else []
        )

        first = matcher.find_matches(sample_draft)
        second = matcher.find_matches(sample_draft)

        assert [m.report_id for m in first] == ["a", "b", "c"]
        assert [m.report_id for m in first] == [m.report_id for m in second]


class TestMatchDraft:
    """Tests for the embedding hand-off used by the submission gate."""

    def test_result_keeps_embedding(
        self,
        matcher: PetMatcher,
        sample_draft: DraftReport,
        fake_embedding: list[float],
    ) -> None:
        result = matcher.match_draft(sample_draft)
        assert result.embedding == fake_embedding
        assert result.embedding_attempted is True

    def test_failed_embedding_is_marked_attempted(
        self, matcher: PetMatcher, sample_draft: DraftReport
    ) -> None:
        matcher.embedder.generate.return_value = None
        result = matcher.match_draft(sample_draft)
        assert result.embedding is None
        assert result.embedding_attempted is True

    def test_unmatched_status_not_attempted(
        self, matcher: PetMatcher, sample_draft: DraftReport
    ) -> None:
        result = matcher.match_draft(_draft(sample_draft, ReportStatus.FOR_ADOPTION))
        assert result.embedding_attempted is False
