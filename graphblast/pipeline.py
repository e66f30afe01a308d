"""
The two BLAST+ stages: makeblastdb over the graph nodes, then blastn with the queries.

Both stages block for up to `settings.timeout_seconds`, so GUIs call them from
a worker thread. Only one stage runs at a time per pipeline; a second call while
one is running returns a BUSY result straight away. Stage failures are caught
here and returned as a StageResult, never raised.
"""

import logging
import shlex
import sys
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .blast_output import parse_blast_output
from .errors import (
    BlastSearchError,
    MalformedRecordError,
    ParameterError,
    SearchInProgressError,
    StageOrderError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolTimeoutError,
    UnresolvableReferenceError,
    WorkspaceError,
)
from .runner import ToolRunner, default_locator, raise_for_result
from .session import SearchSession
from .settings import SearchSettings, normalize_parameters

logger = logging.getLogger(__name__)

MessageFn = Callable[[str], None]

BUILD_STAGE = "build"
SEARCH_STAGE = "search"

BASE_SEARCH_ARGS = ["-outfmt", "6"]

NO_HITS_MESSAGE = "No BLAST hits were found for the given queries and parameters."
FAILURE_MESSAGES = {
    BUILD_STAGE: "There was a problem building the BLAST database.",
    SEARCH_STAGE: "There was a problem running the BLAST search.",
}
TIMEOUT_MESSAGES = {
    BUILD_STAGE: "The BLAST database did not build in the allotted time.\n\n"
    "Increase the 'Allowed time' setting and try again.",
    SEARCH_STAGE: "The BLAST search did not finish in the allotted time.\n\n"
    "Increase the 'Allowed time' setting and try again.",
}


class StageKind(Enum):
    SUCCESS = "success"
    NO_HITS = "no_hits"
    TOOL_NOT_FOUND = "tool_not_found"
    TOOL_FAILED = "tool_failed"
    TIMED_OUT = "timed_out"
    MALFORMED_OUTPUT = "malformed_output"
    UNRESOLVED_REFERENCE = "unresolved_reference"
    BAD_PARAMETERS = "bad_parameters"
    WORKSPACE_ERROR = "workspace_error"
    NOT_READY = "not_ready"
    BUSY = "busy"


@dataclass
class StageResult:
    stage: str
    kind: StageKind
    message: str
    cmd: str = ""
    hit_count: int = 0

    @property
    def ok(self) -> bool:
        return self.kind in (StageKind.SUCCESS, StageKind.NO_HITS)


def _failure_result(stage: str, exc: BlastSearchError) -> StageResult:
    cmd = getattr(exc, "cmd", "")
    if isinstance(exc, ToolNotFoundError):
        return StageResult(stage, StageKind.TOOL_NOT_FOUND, str(exc))
    if isinstance(exc, ToolTimeoutError):
        return StageResult(stage, StageKind.TIMED_OUT, TIMEOUT_MESSAGES[stage], cmd=cmd)
    if isinstance(exc, ToolExecutionError):
        message = FAILURE_MESSAGES[stage]
        if exc.stderr.strip():
            message = f"{message}\n\n{exc.stderr.strip()}"
        return StageResult(stage, StageKind.TOOL_FAILED, message, cmd=cmd)
    if isinstance(exc, MalformedRecordError):
        return StageResult(stage, StageKind.MALFORMED_OUTPUT, f"The BLAST output could not be read. {exc}")
    if isinstance(exc, UnresolvableReferenceError):
        return StageResult(
            stage,
            StageKind.UNRESOLVED_REFERENCE,
            f"The BLAST results do not match the current graph and queries. {exc}",
        )
    if isinstance(exc, WorkspaceError):
        return StageResult(stage, StageKind.WORKSPACE_ERROR, f"{FAILURE_MESSAGES[stage]} {exc}")
    if isinstance(exc, ParameterError):
        return StageResult(stage, StageKind.BAD_PARAMETERS, str(exc))
    if isinstance(exc, SearchInProgressError):
        return StageResult(stage, StageKind.BUSY, str(exc))
    return StageResult(stage, StageKind.NOT_READY, str(exc))


def split_parameters(text: str) -> List[str]:
    try:
        return shlex.split(text, posix=not sys.platform.startswith("win"))
    except ValueError as exc:
        raise ParameterError(f"Could not read the blastn parameters {text!r}: {exc}") from None


class SearchPipeline:
    """Runs the database build and the search for one session."""

    def __init__(
        self,
        session: SearchSession,
        settings: Optional[SearchSettings] = None,
        runner: Optional[ToolRunner] = None,
        say: MessageFn = print,
    ):
        self.session = session
        self.settings = settings or SearchSettings()
        self.runner = runner or ToolRunner(default_locator(self.settings.extra_tool_dirs))
        self.say = say
        self._busy = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    def cancel(self) -> bool:
        """Kill the external process of the running stage, if any."""
        return self.runner.cancel()

    def build_database(self) -> StageResult:
        return self._run_stage(BUILD_STAGE, self._build_database)

    def run_search(self, extra_parameters: Optional[str] = None) -> StageResult:
        """
        Search all queries against the database. `extra_parameters` defaults to
        settings.blast_parameters and is appended to the fixed blastn arguments.
        """
        return self._run_stage(SEARCH_STAGE, self._search, extra_parameters)

    def _run_stage(self, stage: str, fn, *args) -> StageResult:
        if not self._busy.acquire(blocking=False):
            result = _failure_result(stage, SearchInProgressError("A BLAST process is already running."))
            logger.warning("Refusing %s stage: %s", stage, result.message)
            return result
        try:
            logger.info("Starting %s stage", stage)
            result = fn(*args)
        except BlastSearchError as exc:
            logger.warning("%s stage failed: %s", stage, exc)
            result = _failure_result(stage, exc)
            if stage == BUILD_STAGE and isinstance(exc, (ToolExecutionError, ToolTimeoutError, WorkspaceError)):
                # all_nodes.fasta was rewritten, so any older index no longer matches it.
                self.session.set_database_ready(False)
        finally:
            self._busy.release()
        self.say(result.message)
        return result

    def _build_database(self) -> StageResult:
        tool = self.runner.locate(self.settings.makeblastdb_command)
        if len(list(self.session.graph.nodes())) == 0:
            raise StageOrderError("The graph has no nodes to build a BLAST database from.")
        fasta = self.session.workspace.write_all_nodes(self.session.graph)
        cmd = [tool, "-in", str(fasta), "-dbtype", "nucl"]
        timeout = self.settings.timeout_seconds
        result = self.runner.run(cmd, timeout)
        raise_for_result(result, timeout)
        self.session.set_database_ready(True)
        return StageResult(BUILD_STAGE, StageKind.SUCCESS, "BLAST database built.", cmd=result.cmd_text)

    def _search(self, extra_parameters: Optional[str]) -> StageResult:
        if not self.session.database_ready:
            raise StageOrderError("Build the BLAST database before searching.")
        queries = self.session.queries()
        if not queries:
            raise StageOrderError("Add at least one query before searching.")
        params = normalize_parameters(
            self.settings.blast_parameters if extra_parameters is None else extra_parameters
        )
        extra_args = split_parameters(params)
        tool = self.runner.locate(self.settings.blastn_command)

        workspace = self.session.workspace
        queries_fasta = workspace.write_queries(queries)
        cmd = [
            tool,
            "-query",
            str(queries_fasta),
            "-db",
            str(workspace.database_path),
            *BASE_SEARCH_ARGS,
            *extra_args,
        ]
        timeout = self.settings.timeout_seconds
        result = self.runner.run(cmd, timeout)
        raise_for_result(result, timeout)

        # Nothing is committed until the whole batch has parsed and resolved.
        records = parse_blast_output(result.stdout)
        hits = self.session.correlate(records)
        self.session.commit_hits(hits)
        self.settings.blast_parameters = params

        if not hits:
            return StageResult(SEARCH_STAGE, StageKind.NO_HITS, NO_HITS_MESSAGE, cmd=result.cmd_text)
        noun = "hit" if len(hits) == 1 else "hits"
        return StageResult(
            SEARCH_STAGE,
            StageKind.SUCCESS,
            f"BLAST search found {len(hits):,} {noun}.",
            cmd=result.cmd_text,
            hit_count=len(hits),
        )
