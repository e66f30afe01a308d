"""
GraphBlast: BLAST query sequences against the nodes of an assembly graph.

Key entrypoints
---------------
- SearchSession: queries, hits and database status for one search workflow.
- SearchPipeline: runs makeblastdb over the graph nodes, then blastn for the queries.
- parse_blast_output: read blastn tabular output (-outfmt 6) into alignment records.
- ToolRunner: locate and run an external executable with a timeout.
- launch: start the PyQt5 search window (imported lazily).
"""

from .blast_output import AlignmentRecord, parse_blast_output
from .errors import BlastSearchError
from .graph import Node, NodeGraph
from .hits import Hit
from .pipeline import SearchPipeline, StageKind, StageResult
from .queries import Query, QueryRegistry, clean_query_name
from .runner import ToolResult, ToolRunner
from .session import SearchSession, SessionEvent
from .settings import SearchSettings
from .state import WorkflowState
from .workspace import SearchWorkspace


def launch(nodes_fasta=None) -> None:
    from .gui import launch as _launch

    _launch(nodes_fasta)


__all__ = [
    "AlignmentRecord",
    "BlastSearchError",
    "Hit",
    "Node",
    "NodeGraph",
    "Query",
    "QueryRegistry",
    "SearchPipeline",
    "SearchSession",
    "SearchSettings",
    "SearchWorkspace",
    "SessionEvent",
    "StageKind",
    "StageResult",
    "ToolResult",
    "ToolRunner",
    "WorkflowState",
    "clean_query_name",
    "launch",
    "parse_blast_output",
]
