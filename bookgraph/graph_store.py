from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import logging
import threading

from neo4j import GraphDatabase, ManagedTransaction
from pyvis.network import Network

from .config import Settings, get_settings
from .triples import BASE_URI, Statement, is_blank_node, local_name


logger = logging.getLogger(__name__)


UNKNOWN_VALUE = "Unknown"


class TripleStore(ABC):
    """
    Minimal triple store contract used by the fact pipeline.

    Literal attributes are single-valued per (entity, predicate): upserting
    an attribute replaces any previous value.
    """

    @abstractmethod
    def list_statements(self) -> List[Statement]:
        """Return every statement currently stored."""

    @abstractmethod
    def add(self, statement: Statement) -> None:
        """Store one statement as-is."""

    @abstractmethod
    def upsert_entity(self, entity_id: str, attributes: Mapping[str, Any]) -> None:
        """Create the entity if needed and set the given literal attributes."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every statement."""

    def get_attribute(self, entity_id: str, name: str) -> str:
        for st in self.list_statements():
            if (
                st.subject_id == entity_id
                and st.is_literal
                and local_name(st.predicate) == name
            ):
                return str(st.object)
        return UNKNOWN_VALUE

    def replace_all(self, statements: Iterable[Statement]) -> None:
        statements = list(statements)
        self.clear()
        for st in statements:
            self.add(st)
        logger.info("Triple store replaced with %d statement(s)", len(statements))


class InMemoryTripleStore(TripleStore):
    """Insertion-ordered list of statements guarded by a lock."""

    def __init__(self, statements: Iterable[Statement] = ()):
        self._statements: List[Statement] = list(statements)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._statements)

    def list_statements(self) -> List[Statement]:
        with self._lock:
            return list(self._statements)

    def add(self, statement: Statement) -> None:
        with self._lock:
            self._statements.append(statement)

    def upsert_entity(self, entity_id: str, attributes: Mapping[str, Any]) -> None:
        with self._lock:
            names = {local_name(name) for name in attributes}
            self._statements = [
                st
                for st in self._statements
                if not (
                    st.subject_id == entity_id
                    and st.is_literal
                    and local_name(st.predicate) in names
                )
            ]
            for name, value in attributes.items():
                self._statements.append(Statement(entity_id, name, value, True))
        logger.info("Upserted entity %s (%d attribute(s))", entity_id, len(attributes))

    def clear(self) -> None:
        with self._lock:
            self._statements = []


@dataclass
class GraphConfig:
    """
    Simple holder for graph-related configuration.
    """

    uri: str
    username: str
    password: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "GraphConfig":
        return cls(
            uri=settings.neo4j_uri,
            username=settings.neo4j_username,
            password=settings.neo4j_password,
        )


class Neo4jTripleStore(TripleStore):
    """
    Triple store backed by Neo4j.

    Every subject is an (:Entity {uri}) node whose literal attributes are
    node properties keyed by the predicate's local name, so `genre` and
    `http://example.org/book#genre` address the same property. Links
    between entities are [:RELATION {predicate}] relationships.
    """

    def __init__(self, config: GraphConfig | None = None, driver=None):
        self.config = config or GraphConfig.from_settings(get_settings())
        self._driver = driver

    def _get_driver(self):
        if self._driver is None:
            logger.info("Connecting to Neo4j at %s", self.config.uri)
            self._driver = GraphDatabase.driver(
                self.config.uri,
                auth=(self.config.username, self.config.password),
            )
        return self._driver

    def close(self) -> None:
        if self._driver is not None:
            self._driver.close()
            self._driver = None

    def list_statements(self) -> List[Statement]:
        statements: List[Statement] = []
        with self._get_driver().session() as session:
            for record in session.run("MATCH (n:Entity) RETURN n.uri AS uri, properties(n) AS props"):
                for name, value in record["props"].items():
                    if name == "uri":
                        continue
                    statements.append(Statement(record["uri"], name, value, True))
            for record in session.run(
                """
                MATCH (s:Entity)-[r:RELATION]->(t:Entity)
                RETURN s.uri AS source, r.predicate AS predicate, t.uri AS target
                """
            ):
                statements.append(
                    Statement(record["source"], record["predicate"], record["target"], False)
                )
        return statements

    def add(self, statement: Statement) -> None:
        with self._get_driver().session() as session:
            session.execute_write(self._add, statement)

    @staticmethod
    def _add(tx: ManagedTransaction, statement: Statement) -> None:
        if statement.is_literal:
            tx.run(
                """
                MERGE (n:Entity {uri: $uri})
                SET n += $attrs
                """,
                uri=statement.subject_id,
                attrs={local_name(statement.predicate): statement.object},
            )
        else:
            tx.run(
                """
                MERGE (s:Entity {uri: $source})
                MERGE (t:Entity {uri: $target})
                MERGE (s)-[:RELATION {predicate: $predicate}]->(t)
                """,
                source=statement.subject_id,
                target=statement.object,
                predicate=statement.predicate,
            )

    def upsert_entity(self, entity_id: str, attributes: Mapping[str, Any]) -> None:
        with self._get_driver().session() as session:
            session.run(
                """
                MERGE (n:Entity {uri: $uri})
                SET n += $attrs
                """,
                uri=entity_id,
                attrs={local_name(key): value for key, value in attributes.items()},
            )
        logger.info("Upserted entity %s in Neo4j (%d attribute(s))", entity_id, len(attributes))

    def get_attribute(self, entity_id: str, name: str) -> str:
        with self._get_driver().session() as session:
            record = session.run(
                "MATCH (n:Entity {uri: $uri}) RETURN n[$name] AS value",
                uri=entity_id,
                name=local_name(name),
            ).single()
        if record is None or record["value"] is None:
            return UNKNOWN_VALUE
        return str(record["value"])

    def clear(self) -> None:
        with self._get_driver().session() as session:
            session.run("MATCH (n:Entity) DETACH DELETE n")

    def replace_all(self, statements: Iterable[Statement]) -> None:
        statements = list(statements)
        with self._get_driver().session() as session:
            session.execute_write(self._replace_all, statements)
        logger.info("Neo4j graph replaced with %d statement(s)", len(statements))

    @classmethod
    def _replace_all(cls, tx: ManagedTransaction, statements: List[Statement]) -> None:
        tx.run("MATCH (n:Entity) DETACH DELETE n")
        for st in statements:
            cls._add(tx, st)


def create_triple_store(settings: Settings | None = None) -> TripleStore:
    settings = settings or get_settings()
    if settings.uses_neo4j:
        return Neo4jTripleStore(GraphConfig.from_settings(settings))
    return InMemoryTripleStore()


def _short_id(identifier: str) -> str:
    if identifier.startswith(BASE_URI):
        return identifier[len(BASE_URI):]
    return identifier


def graph_data(statements: Iterable[Statement]) -> Tuple[List[Dict[str, str]], List[Dict[str, str]]]:
    """
    Convert statements into vis.js style nodes and edges.

    Each statement becomes one edge. Literal objects become nodes labelled
    with their value. Blank nodes are skipped.
    """
    nodes: List[Dict[str, str]] = []
    edges: List[Dict[str, str]] = []
    node_ids = set()

    for st in statements:
        if is_blank_node(st.subject_id):
            continue
        subj = _short_id(st.subject_id)
        pred = local_name(st.predicate) or st.predicate

        if st.is_literal:
            obj = str(st.object)
        elif is_blank_node(str(st.object)):
            continue
        else:
            obj = _short_id(str(st.object))

        for node_id in (subj, obj):
            if node_id not in node_ids:
                node_ids.add(node_id)
                nodes.append({"id": node_id, "label": node_id})
        edges.append({"source": subj, "target": obj, "type": pred})

    return nodes, edges


def build_graph_html(nodes, edges, height: Optional[int] = None) -> str:
    """
    Build an interactive HTML graph using pyvis from nodes and edges.
    """
    height = height or get_settings().graph_html_height
    net = Network(height=f"{height}px", width="100%", directed=True)
    net.barnes_hut()

    for node in nodes:
        node_id = node.get("id")
        label = node.get("label", node_id)
        net.add_node(node_id, label=label, title=label)

    for edge in edges:
        etype = edge.get("type", "")
        net.add_edge(edge.get("source"), edge.get("target"), label=etype, title=etype)

    # HTML as a string, nothing written to disk.
    return net.generate_html()


__all__ = [
    "UNKNOWN_VALUE",
    "TripleStore",
    "InMemoryTripleStore",
    "GraphConfig",
    "Neo4jTripleStore",
    "create_triple_store",
    "graph_data",
    "build_graph_html",
]
