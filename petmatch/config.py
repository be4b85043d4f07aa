"""Central application configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Central application configuration.

    Reads from environment variables with sensible defaults.
    """

    # Elasticsearch
    elasticsearch_url: str = field(
        default_factory=lambda: os.getenv("ELASTICSEARCH_URL", "http://localhost:9200")
    )
    elastic_cloud_id: str | None = field(
        default_factory=lambda: os.getenv("ELASTIC_CLOUD_ID") or None
    )
    elastic_api_key: str | None = field(
        default_factory=lambda: os.getenv("ELASTIC_API_KEY") or None
    )
    index_name: str = field(
        default_factory=lambda: os.getenv("REPORT_INDEX", "animal_reports")
    )

    # CLIP model (empty model name disables embeddings)
    clip_model_name: str = field(
        default_factory=lambda: os.getenv("CLIP_MODEL_NAME", "ViT-B-32")
    )
    clip_pretrained: str = field(
        default_factory=lambda: os.getenv("CLIP_PRETRAINED", "laion2b_s34b_b79k")
    )
    embedding_dim: int = 512

    # Matching
    matching_enabled: bool = field(
        default_factory=lambda: _env_flag("MATCHING_ENABLED")
    )
    match_threshold: float = 0.70
    match_top_k: int = 5
    knn_num_candidates: int = 50
    excerpt_length: int = 160

    # Reports
    report_ttl_days: int = 60

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


def get_config() -> Config:
    """Get application configuration.

    Returns:
        Config instance with values from environment or defaults.
    """
    return Config()
