"""Embedding generator that never blocks report submission."""

from __future__ import annotations

import logging
import math
from typing import Protocol

from petmatch.data.schemas import DraftReport

logger = logging.getLogger(__name__)


class TextEncoder(Protocol):
    def encode_profile(self, text: str) -> list[float]: ...


def build_embedding_text(draft: DraftReport) -> str:
    """Join species, breed, color and description, in that order.

    No length cap is applied; the model's tokenizer truncates.
    """
    return " ".join(
        [draft.species.value, draft.breed, draft.color, draft.description]
    )


class EmbeddingGenerator:
    """Turn a short animal profile into a plain list of floats.

    The encoder is injected and checked once at construction time. When
    it is missing, :meth:`generate` returns ``None`` without trying, and
    :meth:`is_available` reports ``False``.

    Args:
        encoder: Loaded text encoder, or None when the model is unconfigured.
        expected_dim: Vector length the index expects; 0 skips the check.
    """

    def __init__(self, encoder: TextEncoder | None, expected_dim: int = 0) -> None:
        self.encoder = encoder
        self.expected_dim = expected_dim
        if encoder is None:
            logger.warning("No embedding model configured; matching is disabled")

    @classmethod
    def from_config(cls, model_name: str, pretrained: str, expected_dim: int = 0) -> EmbeddingGenerator:
        """Load the CLIP encoder, degrading to an unavailable generator on failure."""
        if not model_name:
            return cls(None, expected_dim)

        from petmatch.embeddings.clip_encoder import CLIPEncoder

        try:
            encoder = CLIPEncoder(model_name=model_name, pretrained=pretrained)
        except Exception:
            logger.exception("Failed to load CLIP model %s (%s)", model_name, pretrained)
            return cls(None, expected_dim)
        return cls(encoder, expected_dim)

    def is_available(self) -> bool:
        return self.encoder is not None

    def generate(self, text: str) -> list[float] | None:
        """Embed *text* with a single attempt.

        Returns:
            A non-empty list of floats, or None if the model is unavailable,
            failed, or returned anything other than a numeric vector.
        """
        if self.encoder is None:
            return None

        try:
            raw = self.encoder.encode_profile(text)
        except Exception:
            logger.exception("Embedding model call failed")
            return None

        vector = _as_vector(raw)
        if vector is None:
            logger.error("Unexpected embedding response shape: %r", type(raw))
            return None
        if self.expected_dim and len(vector) != self.expected_dim:
            logger.error(
                "Embedding has %d dims, expected %d", len(vector), self.expected_dim
            )
            return None
        return vector


def _as_vector(vector: object) -> list[float] | None:
    if not isinstance(vector, list) or not vector:
        return None
    if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in vector):
        return None
    # Plain floats only, so the vector serializes unchanged into request bodies.
    return [float(v) for v in vector]
