"""Pytest configuration and fixtures for GraphBlast tests."""

from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import pytest

from graphblast.errors import ToolNotFoundError
from graphblast.graph import Node, NodeGraph
from graphblast.pipeline import SearchPipeline
from graphblast.runner import ToolResult
from graphblast.session import SearchSession
from graphblast.settings import SearchSettings
from graphblast.workspace import SearchWorkspace


def blast_line(query: str, label: str, q_start: int, q_end: int, n_start: int, n_end: int, evalue: str = "1e-10") -> str:
    """One blastn -outfmt 6 row with filler for the columns the parser ignores."""
    return "\t".join(
        [query, label, "99.5", "200", "1", "0", str(q_start), str(q_end), str(n_start), str(n_end), evalue, "370"]
    )


class FakeRunner:
    """Stands in for ToolRunner: scripted results, recorded commands, no processes."""

    def __init__(self) -> None:
        self.results: List[ToolResult] = []
        self.calls: List[Tuple[List[str], float]] = []
        self.missing: set = set()
        self.on_run: Optional[Callable[[Sequence[str]], None]] = None
        self.cancel_calls = 0

    def queue(self, stdout: str = "", exit_code: int = 0, timed_out: bool = False, stderr: str = "") -> None:
        self.results.append(
            ToolResult(cmd=[], exit_code=exit_code, stdout=stdout, stderr=stderr, timed_out=timed_out)
        )

    def locate(self, tool: str) -> str:
        if tool in self.missing:
            raise ToolNotFoundError(tool)
        return f"/opt/blast/bin/{tool}"

    def run(self, cmd: Sequence[str], timeout: float) -> ToolResult:
        cmd = list(cmd)
        self.calls.append((cmd, timeout))
        if self.on_run is not None:
            self.on_run(cmd)
        result = self.results.pop(0) if self.results else ToolResult(cmd=[], exit_code=0, stdout="", stderr="")
        result.cmd = cmd
        if result.ok and "-dbtype" in cmd:
            # makeblastdb leaves its index next to the input FASTA
            fasta = cmd[cmd.index("-in") + 1]
            Path(fasta + ".nin").touch()
        return result

    def cancel(self) -> bool:
        self.cancel_calls += 1
        return False


@pytest.fixture
def graph() -> NodeGraph:
    return NodeGraph(
        [
            Node(7, "ACGT" * 20),
            Node(12, "GGCCA" * 30),
            Node(-3, "TTTTAAAA"),
        ]
    )


@pytest.fixture
def workspace(tmp_path: Path) -> SearchWorkspace:
    return SearchWorkspace(tmp_path / "blast")


@pytest.fixture
def session(graph: NodeGraph, workspace: SearchWorkspace) -> SearchSession:
    return SearchSession(graph, workspace)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def settings() -> SearchSettings:
    return SearchSettings(blast_parameters="", timeout_seconds=5)


@pytest.fixture
def messages() -> List[str]:
    return []


@pytest.fixture
def pipeline(session: SearchSession, settings: SearchSettings, runner: FakeRunner, messages: List[str]) -> SearchPipeline:
    return SearchPipeline(session, settings, runner=runner, say=messages.append)


@pytest.fixture
def ready_pipeline(pipeline: SearchPipeline) -> SearchPipeline:
    """Pipeline whose database stage has already succeeded and which has query Q1."""
    assert pipeline.build_database().ok
    pipeline.session.add_query("Q1", "ACGTACGTAC" * 3)
    return pipeline
