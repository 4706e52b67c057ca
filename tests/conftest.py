"""
Shared fixtures: a deterministic bag-of-words embedder and a recording
completer, so no model download or network access happens in tests.
"""

import hashlib
import re
from typing import List, Sequence

import numpy as np
import pytest

from bookgraph.config import Settings
from bookgraph.graph_store import InMemoryTripleStore
from bookgraph.library import LibraryService
from bookgraph.sample_data import sample_statements


def make_settings(**overrides) -> Settings:
    values = dict(
        llm_base_url="http://localhost:8000/v1",
        llm_api_key="test",
        llm_model_name="test-model",
        llm_max_output_tokens=64,
        llm_temperature=0.0,
        llm_timeout_seconds=5.0,
        embedder_model_path="unused",
        embedder_device="cpu",
        graph_backend="memory",
        neo4j_uri="bolt://neo4j.test:7687",
        neo4j_username="neo4j",
        neo4j_password="secret",
        graph_html_height=400,
    )
    values.update(overrides)
    return Settings(**values)


class HashingEmbedder:
    """Hashes lowercase tokens into a fixed number of buckets."""

    def __init__(self, dim: int = 64):
        self.dim = dim
        self.batches: List[List[str]] = []

    def _vector(self, text: str) -> np.ndarray:
        vec = np.zeros(self.dim, dtype=np.float32)
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            bucket = int(hashlib.md5(token.encode("utf-8")).hexdigest(), 16) % self.dim
            vec[bucket] += 1.0
        norm = np.linalg.norm(vec)
        return vec / norm if norm > 0 else vec

    def embed(self, text: str) -> np.ndarray:
        return self._vector(text)

    def embed_batch(self, texts: Sequence[str]) -> np.ndarray:
        self.batches.append(list(texts))
        return np.stack([self._vector(t) for t in texts])


class RecordingCompleter:
    def __init__(self, answer: str = "You might enjoy Dune."):
        self.answer = answer
        self.prompts: List[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answer


@pytest.fixture
def embedder() -> HashingEmbedder:
    return HashingEmbedder()


@pytest.fixture
def completer() -> RecordingCompleter:
    return RecordingCompleter()


@pytest.fixture
def store() -> InMemoryTripleStore:
    return InMemoryTripleStore(sample_statements())


@pytest.fixture
def library(store, embedder, completer) -> LibraryService:
    service = LibraryService(store=store, embedder=embedder, completer=completer)
    service.init()
    return service
