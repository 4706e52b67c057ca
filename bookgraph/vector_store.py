from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import List, Protocol, Sequence, Tuple

import numpy as np

from .fact_extractor import Fact


logger = logging.getLogger(__name__)


class TextEmbedder(Protocol):
    def embed(self, text: str) -> np.ndarray: ...

    def embed_batch(self, texts: Sequence[str]) -> np.ndarray: ...


@dataclass(frozen=True)
class _Snapshot:
    """
    Immutable index content.

    Attributes:
        embeddings: float32 array of shape (num_facts, dim), rows unit-normalised
        facts: facts in insertion order, row i of embeddings belongs to facts[i]
    """

    embeddings: np.ndarray
    facts: Tuple[Fact, ...]


_EMPTY = _Snapshot(embeddings=np.zeros((0, 0), dtype=np.float32), facts=())


def _normalize_rows(matrix: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    norms = np.maximum(norms, 1e-8)
    return (matrix / norms).astype(np.float32)


class VectorIndex:
    """
    In-memory exact nearest-neighbour index over fact sentences.

    The index is never mutated in place: rebuild() prepares a complete
    snapshot and publishes it with a single reference assignment, so a
    concurrent query() sees either the previous or the new content.
    """

    def __init__(self, embedder: TextEmbedder):
        self.embedder = embedder
        self._snapshot = _EMPTY
        self._write_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._snapshot.facts)

    @property
    def facts(self) -> Tuple[Fact, ...]:
        return self._snapshot.facts

    def rebuild(self, facts: Sequence[Fact]) -> None:
        """
        Replace the whole index with embeddings of the given facts.

        Cost is one embedding per fact, i.e. linear in the size of the graph.
        If embedding fails the previous snapshot stays in place.
        """
        facts = tuple(facts)
        with self._write_lock:
            if not facts:
                self._snapshot = _EMPTY
                logger.info("Vector index rebuilt empty")
                return

            logger.info("Encoding %d fact(s) for vector index rebuild", len(facts))
            embeddings = self.embedder.embed_batch([f.text for f in facts])
            embeddings = np.asarray(embeddings, dtype=np.float32)
            if embeddings.ndim != 2 or embeddings.shape[0] != len(facts):
                raise ValueError(
                    f"Embedder returned shape {embeddings.shape} for {len(facts)} fact(s)"
                )
            snapshot = _Snapshot(embeddings=_normalize_rows(embeddings), facts=facts)
            self._snapshot = snapshot
            logger.info(
                "Vector index rebuilt with %d vector(s) of dim %d",
                len(facts),
                embeddings.shape[1],
            )

    def query(self, query_embedding: np.ndarray, k: int) -> List[Tuple[Fact, float]]:
        """
        Return the k facts most similar to query_embedding, best first.

        Scores are cosine similarities. Equal scores keep insertion order.
        """
        if not isinstance(k, int) or isinstance(k, bool) or k < 1:
            raise ValueError(f"k must be a positive integer, got {k!r}")

        snapshot = self._snapshot
        if not snapshot.facts:
            return []

        query = np.asarray(query_embedding, dtype=np.float32).reshape(-1)
        norm = np.linalg.norm(query)
        if norm > 0:
            query = query / norm

        scores = snapshot.embeddings @ query
        order = np.argsort(-scores, kind="stable")[:k]
        return [(snapshot.facts[i], float(scores[i])) for i in order]

    def search(self, text: str, k: int) -> List[Tuple[Fact, float]]:
        """Embed text with the index's own embedder and query."""
        return self.query(self.embedder.embed(text), k)


__all__ = ["TextEmbedder", "VectorIndex"]
