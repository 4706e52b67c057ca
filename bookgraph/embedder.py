from typing import Sequence

import numpy as np
from sentence_transformers import SentenceTransformer

from .config import get_settings


_model: SentenceTransformer | None = None


def _get_model() -> SentenceTransformer:
    global _model
    if _model is None:
        settings = get_settings()
        _model = SentenceTransformer(
            settings.embedder_model_path,
            device=settings.embedder_device,
        )
    return _model


class Embedder:
    """
    Sentence embedder shared by facts and questions.

    Vectors are unit-normalised, so cosine similarity is a plain dot product.
    """

    def __init__(self, model: SentenceTransformer | None = None):
        self._model = model

    @property
    def model(self) -> SentenceTransformer:
        if self._model is None:
            self._model = _get_model()
        return self._model

    def embed_batch(self, texts: Sequence[str]) -> np.ndarray:
        if not texts:
            return np.zeros((0, 0), dtype=np.float32)
        embeddings = self.model.encode(
            list(texts),
            convert_to_numpy=True,
            normalize_embeddings=True,
        )
        return np.asarray(embeddings, dtype=np.float32)

    def embed(self, text: str) -> np.ndarray:
        return self.embed_batch([text])[0]


__all__ = ["Embedder"]
