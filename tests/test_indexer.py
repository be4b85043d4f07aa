"""Tests for petmatch/search/indexer.py."""

from __future__ import annotations

from unittest.mock import MagicMock

from petmatch.search.indexer import (
    PET_REPORT_MAPPING,
    REPORT_INDEX_NAME,
    build_index_mapping,
    create_index,
)


class TestReportIndexMapping:
    """Tests for index mapping configuration."""

    def test_embedding_is_cosine_dense_vector(self) -> None:
        props = PET_REPORT_MAPPING["mappings"]["properties"]
        assert props["embedding"]["type"] == "dense_vector"
        assert props["embedding"]["dims"] == 512
        assert props["embedding"]["similarity"] == "cosine"
        assert props["embedding"]["index"] is True

    def test_filter_fields_are_keywords(self) -> None:
        """Status and species must be exact-match keyword fields."""
        props = PET_REPORT_MAPPING["mappings"]["properties"]
        assert props["status"]["type"] == "keyword"
        assert props["species"]["type"] == "keyword"
        assert props["report_id"]["type"] == "keyword"

    def test_custom_dims(self) -> None:
        mapping = build_index_mapping(768)
        assert mapping["mappings"]["properties"]["embedding"]["dims"] == 768

    def test_index_name(self) -> None:
        assert REPORT_INDEX_NAME == "animal_reports"


class TestCreateIndex:
    def test_creates_new_index(self, mock_es_client: MagicMock) -> None:
        mock_es_client.indices.exists.return_value = False
        assert create_index(mock_es_client, "test_reports") is True
        mock_es_client.indices.create.assert_called_once_with(
            index="test_reports", body=PET_REPORT_MAPPING
        )

    def test_keeps_existing_index(self, mock_es_client: MagicMock) -> None:
        """Existing reports must survive a restart."""
        mock_es_client.indices.exists.return_value = True
        assert create_index(mock_es_client, "test_reports") is False
        mock_es_client.indices.delete.assert_not_called()
        mock_es_client.indices.create.assert_not_called()

    def test_recreate_existing_index(self, mock_es_client: MagicMock) -> None:
        mock_es_client.indices.exists.return_value = True
        create_index(mock_es_client, "test_reports", recreate=True)
        mock_es_client.indices.delete.assert_called_once_with(index="test_reports")
        mock_es_client.indices.create.assert_called_once()
