import logging
from dataclasses import dataclass
from typing import Iterable, List

from .blast_output import AlignmentRecord
from .errors import UnresolvableReferenceError
from .graph import GraphRepository, Node
from .queries import Query, QueryRegistry

logger = logging.getLogger(__name__)

HIT_TABLE_HEADERS = [
    "Node number",
    "Node length",
    "Node start",
    "Node end",
    "Query name",
    "Query start",
    "Query end",
    "E-value",
]


@dataclass(eq=False)
class Hit:
    """One alignment of a query onto a graph node. Node and query are shared, not copied."""

    node: Node
    node_start: int
    node_end: int
    query: Query
    query_start: int
    query_end: int
    e_value: str

    def table_row(self) -> List[str]:
        return [
            self.node.number_text(),
            f"{self.node.length:,}",
            f"{self.node_start:,}",
            f"{self.node_end:,}",
            self.query.name,
            f"{self.query_start:,}",
            f"{self.query_end:,}",
            self.e_value,
        ]


def correlate_hits(
    records: Iterable[AlignmentRecord],
    graph: GraphRepository,
    registry: QueryRegistry,
) -> List[Hit]:
    """
    Resolve every record to its node and query.

    All or nothing: the first record naming an unknown node or query raises
    UnresolvableReferenceError and no hit from the batch is returned. Query hit
    counts are left alone; `apply_hit_counts` does that once the batch is accepted.
    """
    hits: List[Hit] = []
    for rec in records:
        if not graph.node_exists(rec.node_number):
            raise UnresolvableReferenceError("node", rec.node_number)
        query = registry.find_by_name(rec.query_name)
        if query is None:
            raise UnresolvableReferenceError("query", rec.query_name)
        hits.append(
            Hit(
                node=graph.get_node(rec.node_number),
                node_start=rec.node_start,
                node_end=rec.node_end,
                query=query,
                query_start=rec.query_start,
                query_end=rec.query_end,
                e_value=rec.e_value,
            )
        )
    logger.debug("Correlated %d hits", len(hits))
    return hits


def apply_hit_counts(hits: Iterable[Hit]) -> None:
    for hit in hits:
        hit.query.hits += 1
