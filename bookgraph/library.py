from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .config import Settings, get_settings
from .fact_extractor import BookRecord, extract_facts
from .graph_store import UNKNOWN_VALUE, TripleStore, create_triple_store, graph_data
from .rag_pipeline import Completer, RetrievalOrchestrator
from .sample_data import sample_statements
from .triples import EntityKind, Statement, book_uri, entity_kind, local_name
from .vector_store import TextEmbedder, VectorIndex


logger = logging.getLogger(__name__)


BOOK_FIELDS = ("title", "author", "genre", "level")


@dataclass
class BookDetails:
    uri: str
    title: str
    author: str
    genre: str
    level: str
    recommended_for: List[str] = field(default_factory=list)


@dataclass
class Reader:
    uri: str
    name: str
    prefers_theme: str
    reading_level: str

    def likes(self, genre: str, level: str) -> bool:
        if self.prefers_theme == UNKNOWN_VALUE or self.reading_level == UNKNOWN_VALUE:
            return False
        return (
            self.prefers_theme.lower() in genre.lower()
            and self.reading_level.lower() == level.lower()
        )


class LibraryService:
    """
    Owns the triple store, the fact index and the question answering.

    Every mutation rebuilds the whole index before returning, so retrieval
    always reflects the current graph. Mutations and rebuilds are serialised:
    a rebuild never publishes facts read before a later mutation landed.
    """

    def __init__(self, store: TripleStore, embedder: TextEmbedder, completer: Completer):
        self.store = store
        self.embedder = embedder
        self.index = VectorIndex(embedder)
        self.orchestrator = RetrievalOrchestrator(self.index, completer)
        self._lock = threading.RLock()

    def init(self, seed: bool = True) -> None:
        """Load the sample graph into an empty store and build the index."""
        with self._lock:
            if seed and not self.store.list_statements():
                logger.info("Triple store is empty; loading sample graph")
                self.store.replace_all(sample_statements())
            self.rebuild_index()

    def rebuild_index(self) -> int:
        with self._lock:
            facts = extract_facts(self.store.list_statements())
            self.index.rebuild(facts)
            return len(facts)

    # Queries

    def ask(self, question: str) -> str:
        return self.orchestrator.answer(question)

    def list_books(self) -> List[Dict[str, str]]:
        books = []
        for st in self.store.list_statements():
            if (
                st.is_literal
                and entity_kind(st.subject_id) is EntityKind.BOOK
                and local_name(st.predicate) == "title"
            ):
                books.append({"uri": st.subject_id, "title": str(st.object)})
        return books

    def readers(self) -> List[Reader]:
        attrs: Dict[str, Dict[str, str]] = {}
        for st in self.store.list_statements():
            if st.is_literal and entity_kind(st.subject_id) is EntityKind.USER:
                attrs.setdefault(st.subject_id, {})[local_name(st.predicate)] = str(st.object)
        return [
            Reader(
                uri=uri,
                name=values.get("name", uri),
                prefers_theme=values.get("prefersTheme", UNKNOWN_VALUE),
                reading_level=values.get("readingLevel", UNKNOWN_VALUE),
            )
            for uri, values in attrs.items()
        ]

    def book_details(self, uri: str) -> Optional[BookDetails]:
        """
        Book attributes plus the readers whose preferences match it.

        Returns None when the graph holds nothing about the book.
        """
        if not any(st.subject_id == uri for st in self.store.list_statements()):
            return None
        values = {name: self.store.get_attribute(uri, name) for name in BOOK_FIELDS}
        details = BookDetails(uri=uri, **values)
        details.recommended_for = [
            r.name for r in self.readers() if r.likes(details.genre, details.level)
        ]
        return details

    def graph_view(self) -> Tuple[List[Dict[str, str]], List[Dict[str, str]]]:
        return graph_data(self.store.list_statements())

    # Mutations

    def upsert_book(self, record: BookRecord) -> str:
        book_id = (record.id or "").strip()
        if not book_id:
            raise ValueError("Book id must not be empty")
        uri = book_uri(book_id)
        with self._lock:
            self.store.upsert_entity(
                uri,
                {
                    "title": record.title,
                    "author": record.author,
                    "genre": record.genre,
                    "level": record.level,
                },
            )
            count = self.rebuild_index()
        logger.info("Book %s saved; index now holds %d fact(s)", uri, count)
        return uri

    def replace_graph(self, statements: Iterable[Statement]) -> int:
        with self._lock:
            self.store.replace_all(statements)
            return self.rebuild_index()


def create_library(settings: Settings | None = None) -> LibraryService:
    """Wire the production collaborators: configured store, MiniLM, LLM endpoint."""
    # sentence-transformers and openai are only imported here.
    from .embedder import Embedder
    from .llm_client import LLMClient

    settings = settings or get_settings()
    return LibraryService(
        store=create_triple_store(settings),
        embedder=Embedder(),
        completer=LLMClient(settings),
    )


__all__ = [
    "BOOK_FIELDS",
    "BookDetails",
    "Reader",
    "LibraryService",
    "create_library",
]
