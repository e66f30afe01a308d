"""
Minimal view of the assembly graph needed by the search.

The real graph lives elsewhere; the search only needs to look nodes up by number
and to know their length and sequence. `NodeGraph` is a plain in-memory
implementation used by the command line and the tests.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, Protocol, Tuple

from .io import read_fasta_records

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
NODE_PREFIX = "NODE"


@dataclass(eq=False)
class Node:
    number: int
    sequence: str

    @property
    def length(self) -> int:
        return len(self.sequence)

    @property
    def label(self) -> str:
        return node_label(self.number, self.length)

    def number_text(self) -> str:
        return str(self.number)


class GraphRepository(Protocol):
    def node_exists(self, number: int) -> bool:
        ...

    def get_node(self, number: int) -> Node:
        ...

    def nodes(self) -> Iterable[Node]:
        ...


def node_label(number: int, length: int) -> str:
    """FASTA header used for a node in all_nodes.fasta, e.g. NODE_12_length_5120."""
    return f"{NODE_PREFIX}_{number}_length_{length}"


def node_number_from_label(label: str) -> int:
    """
    Extract the node number from a label of the form <prefix>_<number>[_...].
    Raises ValueError when the second token is missing or not a 64-bit integer.
    """
    parts = label.split("_")
    if len(parts) < 2:
        raise ValueError(f"node label {label!r} has no '_<number>' part")
    try:
        number = int(parts[1])
    except ValueError:
        raise ValueError(f"node label {label!r} does not carry a numeric id") from None
    if not INT64_MIN <= number <= INT64_MAX:
        raise ValueError(f"node id {number} in {label!r} is out of 64-bit range")
    return number


class NodeGraph:
    """Dictionary-backed graph repository."""

    def __init__(self, nodes: Iterable[Node] = ()):
        self._nodes: Dict[int, Node] = {}
        for node in nodes:
            self.add_node(node)

    @classmethod
    def from_records(cls, records: Iterable[Tuple[str, str]]) -> "NodeGraph":
        graph = cls()
        for header, seq in records:
            graph.add_node(Node(node_number_from_label(header.split()[0]), seq))
        return graph

    @classmethod
    def from_fasta(cls, path: Path) -> "NodeGraph":
        """Build a graph from a FASTA whose headers are node labels (NODE_<number>...)."""
        return cls.from_records(read_fasta_records(path))

    def add_node(self, node: Node) -> None:
        if node.number in self._nodes:
            raise ValueError(f"duplicate node number {node.number}")
        self._nodes[node.number] = node

    def node_exists(self, number: int) -> bool:
        return number in self._nodes

    def get_node(self, number: int) -> Node:
        return self._nodes[number]

    def nodes(self) -> Iterator[Node]:
        return iter(sorted(self._nodes.values(), key=lambda n: n.number))

    def __len__(self) -> int:
        return len(self._nodes)
