from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


# Default namespace used when short ids ("book/1") are expanded to URIs.
BASE_URI = "http://example.org/"


class EntityKind(str, Enum):
    BOOK = "book"
    USER = "user"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Statement:
    """
    One subject-predicate-object statement of the graph.

    ``subject_id`` is either a short id such as ``book/123`` or a full URI
    such as ``http://example.org/book/123``. ``predicate`` may likewise be a
    bare name (``title``) or a URI (``http://example.org/book#title``).
    When ``is_literal`` is False the object is a reference to another entity.
    """

    subject_id: str
    predicate: str
    object: Any
    is_literal: bool = True

    @property
    def predicate_name(self) -> str:
        return local_name(self.predicate)

    @property
    def subject_kind(self) -> EntityKind:
        return entity_kind(self.subject_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject": self.subject_id,
            "predicate": self.predicate,
            "object": self.object,
            "is_literal": self.is_literal,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Statement":
        return cls(
            subject_id=data["subject"],
            predicate=data["predicate"],
            object=data["object"],
            is_literal=data.get("is_literal", True),
        )


def local_name(identifier: str) -> str:
    """Return the part of a URI after the last '#' or '/'."""
    if not identifier:
        return ""
    cut = max(identifier.rfind("#"), identifier.rfind("/"))
    return identifier[cut + 1 :]


def entity_kind(subject_id: str) -> EntityKind:
    """Infer the kind of an entity from its id namespace."""
    # Leading slash so that both "book/1" and ".../book/1" match.
    path = "/" + (subject_id or "")
    if "/book/" in path:
        return EntityKind.BOOK
    if "/user/" in path:
        return EntityKind.USER
    return EntityKind.UNKNOWN


def is_blank_node(identifier: str) -> bool:
    return identifier.startswith("_:")


def book_uri(book_id: str) -> str:
    return f"{BASE_URI}book/{book_id.strip()}"


def user_uri(user_id: str) -> str:
    return f"{BASE_URI}user/{user_id.strip()}"


__all__ = [
    "BASE_URI",
    "EntityKind",
    "Statement",
    "local_name",
    "entity_kind",
    "is_blank_node",
    "book_uri",
    "user_uri",
]
