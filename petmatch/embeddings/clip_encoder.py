"""CLIP text encoder for animal profile embeddings."""

from __future__ import annotations

import logging

import torch

logger = logging.getLogger(__name__)


class CLIPEncoder:
    """Encode short animal profiles into CLIP text embedding space.

    Uses the ViT-B-32 text tower producing 512-dimensional L2-normalized
    vectors, so cosine similarity between two profiles is a plain dot
    product.

    Args:
        model_name: CLIP model architecture name.
        pretrained: Pretrained weights identifier.
        device: Device to run model on (auto-detected if None).
    """

    def __init__(
        self,
        model_name: str = "ViT-B-32",
        pretrained: str = "laion2b_s34b_b79k",
        device: str | None = None,
    ) -> None:
        import open_clip

        self.device = device or ("cuda" if torch.cuda.is_available() else "cpu")
        logger.info(
            "Loading CLIP model %s (%s) on %s",
            model_name,
            pretrained,
            self.device,
        )

        self.model, _, _ = open_clip.create_model_and_transforms(
            model_name, pretrained=pretrained
        )
        self.model = self.model.to(self.device).eval()
        self.tokenizer = open_clip.get_tokenizer(model_name)
        self.embedding_dim = 512

        logger.info("CLIP model loaded successfully")

    def encode_profile(self, text: str) -> list[float]:
        """Encode one animal profile into a normalized 512-dim vector.

        Args:
            text: Profile text (species, breed, color, description).

        Returns:
            512-dimensional float vector as a plain Python list.
        """
        tokens = self.tokenizer([text]).to(self.device)

        with torch.no_grad():
            features = self.model.encode_text(tokens)
            features = features / features.norm(dim=-1, keepdim=True)

        return features.cpu().numpy().tolist()[0]
