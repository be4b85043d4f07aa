"""Elasticsearch index for animal reports and their embeddings."""

from __future__ import annotations

import logging

from elasticsearch import Elasticsearch

logger = logging.getLogger(__name__)

REPORT_INDEX_NAME = "animal_reports"


def build_index_mapping(embedding_dim: int = 512) -> dict:
    """Index settings and mappings for animal reports.

    ``status`` and ``species`` are keywords so kNN filters are exact term
    matches; ``embedding`` is a cosine ``dense_vector`` indexed for
    approximate kNN.
    """
    return {
        "settings": {
            "number_of_shards": 1,
            "number_of_replicas": 0,
        },
        "mappings": {
            "properties": {
                "report_id": {"type": "keyword"},
                "user_id": {"type": "keyword"},
                "status": {"type": "keyword"},
                "name": {"type": "text", "analyzer": "standard"},
                "species": {"type": "keyword"},
                "breed": {
                    "type": "text",
                    "fields": {"keyword": {"type": "keyword"}},
                },
                "color": {"type": "text"},
                "size": {"type": "keyword"},
                "description": {"type": "text", "analyzer": "standard"},
                "location": {"type": "text"},
                "image_urls": {"type": "keyword", "index": False},
                "create_alert": {"type": "boolean"},
                "created_at": {"type": "date"},
                "expires_at": {"type": "date"},
                "embedding": {
                    "type": "dense_vector",
                    "dims": embedding_dim,
                    "index": True,
                    "similarity": "cosine",
                },
            }
        },
    }


PET_REPORT_MAPPING = build_index_mapping()


def create_index(
    es: Elasticsearch,
    index_name: str = REPORT_INDEX_NAME,
    embedding_dim: int = 512,
    recreate: bool = False,
) -> bool:
    """Create the report index if it does not exist.

    Args:
        es: Elasticsearch client.
        index_name: Name of the index to create.
        embedding_dim: Dimension of the ``embedding`` dense vector.
        recreate: Delete and recreate an existing index.

    Returns:
        True if the index was created, False if it already existed.
    """
    if es.indices.exists(index=index_name):
        if not recreate:
            logger.info("Index '%s' already exists", index_name)
            return False
        logger.info("Deleting existing index '%s'", index_name)
        es.indices.delete(index=index_name)

    es.indices.create(index=index_name, body=build_index_mapping(embedding_dim))
    logger.info("Created index '%s' with dense vector mappings", index_name)
    return True
