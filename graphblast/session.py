"""
The search session: queries, hits and database status for one search workflow.

A session is created by whoever opens the search (GUI window, CLI run) and kept
for as long as that workflow lives, so earlier results are still there when the
search view is reopened. All mutations go through the session lock; readers get
snapshots. Listeners are called after the lock is released.
"""

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .blast_output import AlignmentRecord
from .graph import GraphRepository
from .hits import Hit, apply_hit_counts, correlate_hits
from .io import read_fasta_records
from .queries import Query, QueryRegistry
from .state import WorkflowState, derive_state
from .workspace import SearchWorkspace

logger = logging.getLogger(__name__)


class SessionEvent(Enum):
    QUERIES_CHANGED = "queries"
    HITS_CHANGED = "hits"
    STATE_CHANGED = "state"


Listener = Callable[[SessionEvent], None]


class SearchSession:
    def __init__(self, graph: GraphRepository, workspace: Optional[SearchWorkspace] = None):
        self.graph = graph
        self.workspace = workspace or SearchWorkspace()
        self.registry = QueryRegistry()
        self._hits: List[Hit] = []
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        self._database_ready = self.workspace.has_database(graph)
        if not self._database_ready:
            # Leftovers from a failed build or from another graph are useless here.
            self.workspace.empty()

    # -- listeners -----------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, before: WorkflowState, *events: SessionEvent) -> None:
        events_out = list(events)
        if self.state != before:
            events_out.append(SessionEvent.STATE_CHANGED)
        for event in events_out:
            for listener in list(self._listeners):
                listener(event)

    # -- read side -----------------------------------------------------------

    @property
    def database_ready(self) -> bool:
        return self._database_ready

    @property
    def searched(self) -> bool:
        with self._lock:
            return any(q.searched for q in self.registry)

    @property
    def state(self) -> WorkflowState:
        with self._lock:
            return derive_state(self._database_ready, len(self.registry), len(self._hits), self.searched)

    def queries(self) -> List[Query]:
        with self._lock:
            return list(self.registry)

    def hits(self) -> List[Hit]:
        with self._lock:
            return list(self._hits)

    @property
    def query_count(self) -> int:
        with self._lock:
            return len(self.registry)

    @property
    def hit_count(self) -> int:
        with self._lock:
            return len(self._hits)

    # -- mutations -----------------------------------------------------------

    def set_database_ready(self, ready: bool) -> None:
        before = self.state
        with self._lock:
            self._database_ready = ready
        self._notify(before)

    def add_query(self, name: str, sequence: str) -> Query:
        """Add one query. Existing hits describe the old query set, so they are cleared."""
        return self.add_queries([(name, sequence)])[0]

    def add_queries(self, records: Iterable[Tuple[str, str]]) -> List[Query]:
        before = self.state
        with self._lock:
            added = [self.registry.add_query(name, seq) for name, seq in records]
            self._clear_hits_locked()
        logger.info("Added %d queries", len(added))
        self._notify(before, SessionEvent.QUERIES_CHANGED, SessionEvent.HITS_CHANGED)
        return added

    def load_queries_from_fasta(self, path: Path) -> List[Query]:
        return self.add_queries(read_fasta_records(path))

    def clear_queries(self) -> None:
        before = self.state
        with self._lock:
            self.registry.remove_all()
            self._clear_hits_locked()
        self._notify(before, SessionEvent.QUERIES_CHANGED, SessionEvent.HITS_CHANGED)

    def clear_hits(self) -> None:
        before = self.state
        with self._lock:
            self._clear_hits_locked()
        self._notify(before, SessionEvent.QUERIES_CHANGED, SessionEvent.HITS_CHANGED)

    def _clear_hits_locked(self) -> None:
        self._hits = []
        self.registry.clear_search_results()

    def correlate(self, records: Sequence[AlignmentRecord]) -> List[Hit]:
        with self._lock:
            return correlate_hits(records, self.graph, self.registry)

    def commit_hits(self, hits: Sequence[Hit]) -> None:
        """Replace the hit collection in one step and recount every query."""
        before = self.state
        with self._lock:
            self._clear_hits_locked()
            self.registry.mark_searched()
            self._hits = list(hits)
            apply_hit_counts(self._hits)
        logger.info("Committed %d hits", len(hits))
        self._notify(before, SessionEvent.QUERIES_CHANGED, SessionEvent.HITS_CHANGED)

    def close(self) -> None:
        self.workspace.cleanup()
