#!/usr/bin/env python3
"""Pet Match: single entry point.

Waits for Elasticsearch, makes sure the report index exists and launches
the FastAPI service.

Usage:
    python main.py
    python main.py --port 8000
    python main.py --reset-index        # drop and recreate the report index
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("petmatch")


def main() -> None:
    """Orchestrate startup: elasticsearch -> index -> serve."""
    from petmatch.config import get_config

    config = get_config()

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    parser = argparse.ArgumentParser(description="Pet Match semantic matching service")
    parser.add_argument("--port", type=int, default=config.port, help="Server port")
    parser.add_argument("--host", type=str, default=config.host, help="Server host")
    parser.add_argument(
        "--es-url", type=str, default=None, help="Elasticsearch URL"
    )
    parser.add_argument(
        "--reset-index",
        action="store_true",
        help="Delete and recreate the report index (destroys stored reports)",
    )
    args = parser.parse_args()

    es_url = args.es_url or config.elasticsearch_url
    if args.es_url:
        # The app factory reads its own config from the environment.
        os.environ["ELASTICSEARCH_URL"] = args.es_url

    # Step 1: Ensure Elasticsearch is running
    logger.info("Step 1/3: Waiting for Elasticsearch at %s", config.elastic_cloud_id or es_url)
    from petmatch.search.es_client import create_es_client, wait_for_elasticsearch

    if not wait_for_elasticsearch(
        es_url, cloud_id=config.elastic_cloud_id, api_key=config.elastic_api_key
    ):
        logger.error("Elasticsearch not available after waiting. Exiting.")
        sys.exit(1)

    # Step 2: Ensure the report index exists
    logger.info("Step 2/3: Ensuring index '%s'", config.index_name)
    from petmatch.search.indexer import create_index

    es = create_es_client(
        es_url, cloud_id=config.elastic_cloud_id, api_key=config.elastic_api_key
    )
    create_index(
        es,
        config.index_name,
        embedding_dim=config.embedding_dim,
        recreate=args.reset_index,
    )
    es.close()

    # Step 3: Launch FastAPI server
    logger.info("Step 3/3: Launching API on %s:%d", args.host, args.port)
    import uvicorn

    from petmatch.api.app import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
