"""
Seed graph used on first start and by the scripts.

Two readers with a preferred theme and reading level, and a handful of
books described by title, author, genre and level.
"""

from typing import List

from .triples import Statement, book_uri, user_uri


BOOKS = [
    ("1", "Dune", "Frank Herbert", "Science Fiction", "Intermediate"),
    ("2", "The Hobbit", "J.R.R. Tolkien", "Fantasy", "Beginner"),
    ("3", "The Hound of the Baskervilles", "Arthur Conan Doyle", "Mystery", "Beginner"),
    ("4", "Neuromancer", "William Gibson", "Science Fiction", "Advanced"),
    ("5", "Murder on the Orient Express", "Agatha Christie", "Mystery", "Intermediate"),
]

USERS = [
    ("alice", "Alice", "Science Fiction", "Intermediate"),
    ("bob", "Bob", "Mystery", "Beginner"),
]

# (user id, book id) pairs linked with "hasRead"
READINGS = [
    ("alice", "4"),
    ("bob", "3"),
]


def sample_statements() -> List[Statement]:
    statements: List[Statement] = []
    for book_id, title, author, genre, level in BOOKS:
        uri = book_uri(book_id)
        statements.extend(
            [
                Statement(uri, "title", title),
                Statement(uri, "author", author),
                Statement(uri, "genre", genre),
                Statement(uri, "level", level),
            ]
        )
    for user_id, name, theme, level in USERS:
        uri = user_uri(user_id)
        statements.extend(
            [
                Statement(uri, "name", name),
                Statement(uri, "prefersTheme", theme),
                Statement(uri, "readingLevel", level),
            ]
        )
    for user_id, book_id in READINGS:
        statements.append(Statement(user_uri(user_id), "hasRead", book_uri(book_id), False))
    return statements


__all__ = ["BOOKS", "USERS", "READINGS", "sample_statements"]
