"""
Fact extraction for the book graph.

Walks every statement of the triple store and turns each literal-valued
statement about a book or a reader into one short natural-language
sentence. These sentences are the unit of retrieval of the vector index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from .triples import EntityKind, Statement, entity_kind, local_name


logger = logging.getLogger(__name__)


BOOK_TITLE_PREDICATE = "title"
USER_NAME_PREDICATE = "name"


class PredicateKind(Enum):
    """User predicates that get their own phrasing. Anything else is OTHER."""

    PREFERS_THEME = "prefersTheme"
    READING_LEVEL = "readingLevel"
    NAME = "name"
    OTHER = "*"

    @classmethod
    def of(cls, predicate: str) -> "PredicateKind":
        for kind in cls:
            if kind.value == predicate:
                return kind
        return cls.OTHER


@dataclass(frozen=True)
class Fact:
    text: str
    subject_id: str
    kind: EntityKind


@dataclass
class BookRecord:
    id: str
    title: str
    author: str
    genre: str
    level: str


def _literal_value(statement: Statement) -> Optional[str]:
    """Return the literal as text, or None if the statement is unusable."""
    if not statement.is_literal:
        return None
    if not statement.subject_id or not statement.predicate:
        logger.debug("Skipping malformed statement %r", statement)
        return None
    if statement.object is None:
        logger.debug("Skipping statement without literal value %r", statement)
        return None
    return str(statement.object)


def _book_fact(book_name: str, predicate: str, value: str) -> str:
    return f"Book: The {predicate} of {book_name} is {value}"


def _user_fact(user_name: str, predicate: str, value: str) -> Optional[str]:
    kind = PredicateKind.of(predicate)
    if kind is PredicateKind.PREFERS_THEME:
        return f"User: {user_name} prefers {value} genre/theme"
    if kind is PredicateKind.READING_LEVEL:
        return f"User: {user_name} has {value} reading level"
    if kind is PredicateKind.NAME:
        # The display name is metadata, not a fact on its own.
        return None
    return f"User: {user_name}'s {predicate} is {value}"


def resolve_names(statements: Iterable[Statement]) -> Dict[EntityKind, Dict[str, str]]:
    """
    First pass: map book ids to titles and user ids to names.
    """
    names: Dict[EntityKind, Dict[str, str]] = {
        EntityKind.BOOK: {},
        EntityKind.USER: {},
    }
    for st in statements:
        value = _literal_value(st)
        if value is None:
            continue
        kind = entity_kind(st.subject_id)
        predicate = local_name(st.predicate)
        if kind is EntityKind.BOOK and predicate == BOOK_TITLE_PREDICATE:
            names[EntityKind.BOOK][st.subject_id] = value
        elif kind is EntityKind.USER and predicate == USER_NAME_PREDICATE:
            names[EntityKind.USER][st.subject_id] = value
    return names


def extract_facts(statements: Iterable[Statement]) -> List[Fact]:
    """
    Convert graph statements into natural-language facts.

    Two passes over the statements: the first resolves display names
    (book titles, user names), the second emits one fact per literal
    statement about a book or a user. Links between entities and
    statements about other namespaces produce no facts.
    """
    statements = list(statements)
    names = resolve_names(statements)
    book_names = names[EntityKind.BOOK]
    user_names = names[EntityKind.USER]

    facts: List[Fact] = []
    for st in statements:
        value = _literal_value(st)
        if value is None:
            continue

        kind = entity_kind(st.subject_id)
        predicate = local_name(st.predicate)
        if kind is EntityKind.BOOK:
            book_name = book_names.get(st.subject_id, local_name(st.subject_id))
            text: Optional[str] = _book_fact(book_name, predicate, value)
        elif kind is EntityKind.USER:
            user_name = user_names.get(st.subject_id, local_name(st.subject_id))
            text = _user_fact(user_name, predicate, value)
        else:
            text = None

        if text is not None:
            facts.append(Fact(text=text, subject_id=st.subject_id, kind=kind))

    logger.info(
        "Extracted %d fact(s) from %d statement(s) (%d book(s), %d user(s))",
        len(facts),
        len(statements),
        len(book_names),
        len(user_names),
    )
    return facts


def extract_record_facts(record: BookRecord) -> List[Fact]:
    """Facts for one book record, phrased like the book branch of extract_facts."""
    fields = (
        ("title", record.title),
        ("author", record.author),
        ("genre", record.genre),
        ("level", record.level),
    )
    return [
        Fact(
            text=_book_fact(record.title, field, value),
            subject_id=record.id,
            kind=EntityKind.BOOK,
        )
        for field, value in fields
    ]


__all__ = [
    "PredicateKind",
    "Fact",
    "BookRecord",
    "resolve_names",
    "extract_facts",
    "extract_record_facts",
]
