import logging
import shutil
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional

from .errors import WorkspaceError
from .graph import GraphRepository
from .io import format_fasta
from .queries import Query

logger = logging.getLogger(__name__)

ALL_NODES_FASTA = "all_nodes.fasta"
QUERIES_FASTA = "queries.fasta"


def nodes_fasta_text(graph: GraphRepository) -> str:
    return format_fasta((node.label, node.sequence) for node in graph.nodes())


class SearchWorkspace:
    """
    Directory holding the files handed to BLAST+: all_nodes.fasta (also the
    database name), the database files makeblastdb writes next to it, and
    queries.fasta. A workspace created without a root owns a temporary directory
    and removes it on cleanup(). In a directory supplied by the caller only
    those files are ever touched.
    """

    def __init__(self, root: Optional[Path] = None):
        if root is None:
            self.root = Path(tempfile.mkdtemp(prefix="graphblast_"))
            self.owned = True
        else:
            self.root = Path(root)
            self.root.mkdir(parents=True, exist_ok=True)
            self.owned = False

    @property
    def all_nodes_fasta(self) -> Path:
        return self.root / ALL_NODES_FASTA

    @property
    def database_path(self) -> Path:
        return self.all_nodes_fasta

    @property
    def queries_fasta(self) -> Path:
        return self.root / QUERIES_FASTA

    def has_database(self, graph: Optional[GraphRepository] = None) -> bool:
        """
        True when makeblastdb has left an index (.nin, or .nal for multi-volume)
        next to all_nodes.fasta. With `graph`, all_nodes.fasta must also hold
        exactly that graph's nodes, otherwise the index belongs to another graph.
        """
        if not self.all_nodes_fasta.is_file():
            return False
        name = ALL_NODES_FASTA
        if not (any(self.root.glob(f"{name}*.nin")) or any(self.root.glob(f"{name}*.nal"))):
            return False
        if graph is None:
            return True
        try:
            current = self.all_nodes_fasta.read_text()
        except (OSError, UnicodeDecodeError):
            return False
        if current != nodes_fasta_text(graph):
            logger.info("BLAST database in %s was built from a different graph", self.root)
            return False
        return True

    def _write(self, path: Path, text: str) -> Path:
        try:
            path.write_text(text)
        except OSError as exc:
            raise WorkspaceError(path, exc) from exc
        logger.debug("Wrote %s", path)
        return path

    def write_all_nodes(self, graph: GraphRepository) -> Path:
        return self._write(self.all_nodes_fasta, nodes_fasta_text(graph))

    def write_queries(self, queries: Iterable[Query]) -> Path:
        return self._write(self.queries_fasta, format_fasta((q.name, q.sequence) for q in queries))

    def own_files(self) -> List[Path]:
        """all_nodes.fasta, every database file makeblastdb named after it, and queries.fasta."""
        files = sorted(self.root.glob(f"{ALL_NODES_FASTA}*"))
        if self.queries_fasta.exists():
            files.append(self.queries_fasta)
        return files

    def empty(self) -> None:
        """Delete the files this workspace writes; anything else in the directory stays."""
        for child in self.own_files():
            if child.is_dir():
                shutil.rmtree(child, ignore_errors=True)
            else:
                child.unlink(missing_ok=True)

    def cleanup(self) -> None:
        if self.owned:
            shutil.rmtree(self.root, ignore_errors=True)
        else:
            self.empty()
