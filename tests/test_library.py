"""
Tests for the library service: rebuild trigger, book operations and
recommendations.
"""

from collections import Counter
import threading

import pytest

from bookgraph.fact_extractor import BookRecord, extract_facts
from bookgraph.graph_store import InMemoryTripleStore
from bookgraph.library import LibraryService, Reader
from bookgraph.sample_data import BOOKS, sample_statements
from bookgraph.triples import Statement, book_uri, user_uri


def _index_texts(library):
    return [f.text for f in library.index.facts]


def test_init_builds_index_from_store(library):
    expected = {f.text for f in extract_facts(sample_statements())}

    assert set(_index_texts(library)) == expected
    assert len(library.index) == len(expected)


def test_init_seeds_an_empty_store(embedder, completer):
    service = LibraryService(InMemoryTripleStore(), embedder, completer)

    service.init()

    assert len(service.list_books()) == len(BOOKS)
    assert "User: Alice prefers Science Fiction genre/theme" in _index_texts(service)


def test_init_without_seed_keeps_store_empty(embedder, completer):
    service = LibraryService(InMemoryTripleStore(), embedder, completer)

    service.init(seed=False)

    assert service.list_books() == []
    assert len(service.index) == 0


def test_upsert_book_is_visible_to_retrieval_immediately(library):
    uri = library.upsert_book(
        BookRecord(id=" 6 ", title="Foundation", author="Isaac Asimov", genre="Science Fiction", level="Beginner")
    )

    assert uri == book_uri("6")
    texts = _index_texts(library)
    assert "Book: The author of Foundation is Isaac Asimov" in texts
    assert "Book: The level of Foundation is Beginner" in texts


def test_updating_a_book_leaves_no_stale_or_duplicate_facts(library):
    library.upsert_book(
        BookRecord(id="1", title="Dune", author="Frank Herbert", genre="Science Fiction", level="Advanced")
    )
    library.upsert_book(
        BookRecord(id="1", title="Dune", author="Frank Herbert", genre="Science Fiction", level="Advanced")
    )

    texts = _index_texts(library)
    assert "Book: The level of Dune is Intermediate" not in texts
    assert "Book: The level of Dune is Advanced" in texts
    assert max(Counter(texts).values()) == 1


def test_index_matches_store_after_every_mutation(library):
    library.upsert_book(BookRecord(id="7", title="Emma", author="Jane Austen", genre="Romance", level="Advanced"))

    expected = {f.text for f in extract_facts(library.store.list_statements())}
    assert set(_index_texts(library)) == expected


class _PausingStore(InMemoryTripleStore):
    """Pauses one named thread right after it reads the statements."""

    def __init__(self, statements, paused_thread):
        super().__init__(statements)
        self.paused_thread = paused_thread
        self.reached = threading.Event()
        self.resume = threading.Event()

    def list_statements(self):
        statements = super().list_statements()
        if threading.current_thread().name == self.paused_thread and not self.reached.is_set():
            self.reached.set()
            self.resume.wait(timeout=5)
        return statements


def test_concurrent_upserts_never_publish_a_stale_index(embedder, completer):
    store = _PausingStore(sample_statements(), paused_thread="writer-emma")
    service = LibraryService(store, embedder, completer)
    service.init()
    emma = BookRecord(id="7", title="Emma", author="Jane Austen", genre="Romance", level="Advanced")
    ulysses = BookRecord(id="8", title="Ulysses", author="James Joyce", genre="Modernist", level="Advanced")

    first = threading.Thread(target=service.upsert_book, args=(emma,), name="writer-emma")
    second = threading.Thread(target=service.upsert_book, args=(ulysses,), name="writer-ulysses")
    first.start()
    assert store.reached.wait(timeout=5)
    second.start()
    second.join(timeout=0.2)

    assert second.is_alive()

    store.resume.set()
    first.join(timeout=5)
    second.join(timeout=5)

    expected = {f.text for f in extract_facts(store.list_statements())}
    assert set(_index_texts(service)) == expected
    assert "Book: The author of Ulysses is James Joyce" in expected


def test_upsert_book_requires_an_id(library):
    before = _index_texts(library)

    with pytest.raises(ValueError):
        library.upsert_book(BookRecord(id="  ", title="X", author="Y", genre="Z", level="W"))

    assert _index_texts(library) == before


def test_ask_grounds_prompt_in_retrieved_facts(library, completer):
    answer = library.ask("What would Alice like?")

    assert answer == completer.answer
    assert "User: Alice prefers Science Fiction genre/theme" in completer.prompts[0]


def test_ask_never_raises(store, embedder):
    class BrokenCompleter:
        def complete(self, prompt):
            raise ConnectionError("endpoint unreachable")

    service = LibraryService(store, embedder, BrokenCompleter())
    service.init()

    assert service.ask("Hi").startswith("Bot Error: ")


def test_list_books(library):
    books = library.list_books()

    assert {"uri": book_uri("1"), "title": "Dune"} in books
    assert len(books) == len(BOOKS)


def test_readers(library):
    readers = {r.name: r for r in library.readers()}

    assert set(readers) == {"Alice", "Bob"}
    assert readers["Bob"].prefers_theme == "Mystery"
    assert readers["Bob"].reading_level == "Beginner"


@pytest.mark.parametrize(
    "book_id, readers",
    [
        ("1", ["Alice"]),  # Science Fiction, Intermediate
        ("3", ["Bob"]),  # Mystery, Beginner
        ("4", []),  # Science Fiction, Advanced
        ("5", []),  # Mystery, Intermediate
    ],
)
def test_book_details_recommendations(library, book_id, readers):
    details = library.book_details(book_uri(book_id))

    assert details is not None
    assert details.recommended_for == readers


def test_book_details_fields_and_unknown_values(library):
    library.store.add(Statement(book_uri("8"), "title", "Untitled Draft"))

    details = library.book_details(book_uri("8"))

    assert details.title == "Untitled Draft"
    assert details.author == "Unknown"
    assert details.recommended_for == []


def test_book_details_for_missing_book(library):
    assert library.book_details(book_uri("404")) is None


def test_reader_matching_is_case_insensitive():
    reader = Reader(uri=user_uri("c"), name="Carol", prefers_theme="mystery", reading_level="BEGINNER")

    assert reader.likes("Cozy Mystery", "beginner")
    assert not reader.likes("Fantasy", "Beginner")


def test_replace_graph_rebuilds_index(library):
    count = library.replace_graph([Statement(book_uri("x"), "title", "Emma")])

    assert count == 1
    assert _index_texts(library) == ["Book: The title of Emma is Emma"]


def test_graph_view(library):
    nodes, edges = library.graph_view()

    assert len(edges) == len(sample_statements())
    assert {"source": "user/alice", "target": "book/4", "type": "hasRead"} in edges
