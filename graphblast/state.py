from enum import Enum


class WorkflowState(Enum):
    """How far the search has progressed. Values match the step numbers shown in the GUI."""

    NO_DATABASE = 1
    DATABASE_READY = 2
    QUERIES_LOADED = 3
    RESULTS_AVAILABLE = 4

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").capitalize()


def derive_state(database_ready: bool, query_count: int, hit_count: int, searched: bool = False) -> WorkflowState:
    """
    Compute the state from the facts it summarises; it is never stored on its own.
    A completed search with zero hits still counts as results.
    """
    if not database_ready:
        return WorkflowState.NO_DATABASE
    if query_count == 0:
        return WorkflowState.DATABASE_READY
    if hit_count > 0 or searched:
        return WorkflowState.RESULTS_AVAILABLE
    return WorkflowState.QUERIES_LOADED
