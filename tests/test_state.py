"""Unit tests for deriving the workflow state."""

import pytest

from graphblast.state import WorkflowState, derive_state


@pytest.mark.parametrize(
    "database,queries,hits,searched,expected",
    [
        (False, 0, 0, False, WorkflowState.NO_DATABASE),
        (False, 3, 0, False, WorkflowState.NO_DATABASE),
        (True, 0, 0, False, WorkflowState.DATABASE_READY),
        (True, 2, 0, False, WorkflowState.QUERIES_LOADED),
        (True, 2, 5, True, WorkflowState.RESULTS_AVAILABLE),
        (True, 2, 0, True, WorkflowState.RESULTS_AVAILABLE),
    ],
)
def test_derive_state(database, queries, hits, searched, expected):
    assert derive_state(database, queries, hits, searched) is expected


def test_states_ordered_like_steps():
    assert [s.value for s in WorkflowState] == [1, 2, 3, 4]
    assert WorkflowState.RESULTS_AVAILABLE.label == "Results available"
