"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from petmatch.config import get_config
from petmatch.embeddings.generator import EmbeddingGenerator
from petmatch.flags import MatchingFlag
from petmatch.matching.matcher import PetMatcher
from petmatch.search.es_client import create_es_client
from petmatch.search.vector_index import VectorIndex
from petmatch.submission.gate import SubmissionGate
from petmatch.submission.store import ReportStore
from petmatch.submission.tasks import (
    LoggingActivityLog,
    LoggingNotifier,
    build_post_commit_tasks,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize shared resources on startup, clean up on shutdown.

    Builds the Elasticsearch client, embedding generator, matcher, report
    store and submission gate shared across all requests.
    """
    config = get_config()

    app.state.config = config
    app.state.matching_flag = MatchingFlag(config.matching_enabled)
    app.state.es_client = create_es_client(
        config.elasticsearch_url,
        cloud_id=config.elastic_cloud_id,
        api_key=config.elastic_api_key,
    )
    app.state.embedder = EmbeddingGenerator.from_config(
        config.clip_model_name,
        config.clip_pretrained,
        expected_dim=config.embedding_dim,
    )
    app.state.matcher = PetMatcher(
        embedder=app.state.embedder,
        index=VectorIndex(
            app.state.es_client,
            index_name=config.index_name,
            num_candidates=config.knn_num_candidates,
        ),
        flag=app.state.matching_flag,
        threshold=config.match_threshold,
        top_k=config.match_top_k,
        excerpt_length=config.excerpt_length,
    )
    app.state.store = ReportStore(
        app.state.es_client,
        index_name=config.index_name,
        ttl_days=config.report_ttl_days,
        embedder=app.state.embedder,
        flag=app.state.matching_flag,
    )
    app.state.gate = SubmissionGate(
        app.state.matcher,
        app.state.store,
        post_commit_tasks=build_post_commit_tasks(
            notifier=LoggingNotifier(),
            activity_log=LoggingActivityLog(),
        ),
    )

    yield

    app.state.es_client.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Pet Match",
        description="Semantic matching of lost, found and sighted pet reports",
        version="0.1.0",
        lifespan=lifespan,
    )

    from petmatch.api.routes import router

    app.include_router(router)

    return app
