"""Elasticsearch client construction and readiness checks."""

from __future__ import annotations

import logging
import time

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import ConnectionError as ESConnectionError

logger = logging.getLogger(__name__)


def _build_es_client(
    url: str = "http://localhost:9200",
    cloud_id: str | None = None,
    api_key: str | None = None,
) -> Elasticsearch:
    """Build a client for a local node or an Elastic Cloud deployment."""
    if cloud_id:
        return Elasticsearch(cloud_id=cloud_id, api_key=api_key)
    if api_key:
        return Elasticsearch(url, api_key=api_key)
    return Elasticsearch(url)


def create_es_client(
    url: str = "http://localhost:9200",
    cloud_id: str | None = None,
    api_key: str | None = None,
) -> Elasticsearch:
    """Create and verify an Elasticsearch client connection.

    Args:
        url: Elasticsearch URL (ignored when cloud_id is set).
        cloud_id: Elastic Cloud deployment ID.
        api_key: API key for either target.

    Returns:
        Connected Elasticsearch client.

    Raises:
        ConnectionError: If unable to connect to Elasticsearch.
    """
    es = _build_es_client(url, cloud_id, api_key)
    target = cloud_id or url
    if not es.ping():
        raise ConnectionError(f"Cannot connect to Elasticsearch at {target}")
    logger.info("Connected to Elasticsearch at %s", target)
    return es


def wait_for_elasticsearch(
    url: str,
    timeout: int = 120,
    cloud_id: str | None = None,
    api_key: str | None = None,
    interval: float = 5.0,
) -> bool:
    """Poll Elasticsearch until it answers a ping or *timeout* seconds pass.

    Returns:
        True if ES is healthy, False if timeout reached.
    """
    es = _build_es_client(url, cloud_id, api_key)
    target = cloud_id or url
    start = time.monotonic()

    while time.monotonic() - start < timeout:
        try:
            if es.ping():
                logger.info("Elasticsearch is ready at %s", target)
                return True
        except ESConnectionError:
            logger.debug("Elasticsearch not reachable yet at %s", target)
        logger.info("Waiting for Elasticsearch...")
        time.sleep(interval)

    logger.error("Elasticsearch not available at %s after %ds", target, timeout)
    return False
