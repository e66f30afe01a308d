from typing import Optional


class BlastSearchError(RuntimeError):
    """Base class for every failure the search core reports."""


class ToolNotFoundError(BlastSearchError):
    """Raised when an external BLAST+ executable cannot be located."""

    def __init__(self, tool: str, searched: str = ""):
        self.tool = tool
        self.searched = searched
        super().__init__(f"The program {tool} was not found.  Please install NCBI BLAST to use this feature.")


class ToolExecutionError(BlastSearchError):
    """Raised when an external tool exits with non-zero status."""

    def __init__(self, cmd: str, exit_code: Optional[int], stderr: str = ""):
        self.cmd = cmd
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"Command failed ({exit_code}): {cmd}")


class ToolTimeoutError(BlastSearchError):
    """Raised when an external tool is killed for running past its timeout."""

    def __init__(self, cmd: str, timeout: float):
        self.cmd = cmd
        self.timeout = timeout
        super().__init__(f"Command did not finish within {timeout:g}s: {cmd}")


class MalformedRecordError(BlastSearchError):
    """Raised for a tabular output line that cannot be read as an alignment record."""

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"Malformed BLAST output at line {line_number}: {reason}")


class UnresolvableReferenceError(BlastSearchError):
    """Raised when a record names a node or query that does not exist."""

    def __init__(self, kind: str, reference: object):
        self.kind = kind
        self.reference = reference
        super().__init__(f"BLAST output refers to unknown {kind} {reference!r}")


class SearchInProgressError(BlastSearchError):
    """Raised when a stage is started while another one is still running."""


class StageOrderError(BlastSearchError):
    """Raised when a stage's preconditions (database, queries) are not met."""


class ParameterError(BlastSearchError):
    """Raised when the extra blastn parameters cannot be split into arguments."""


class WorkspaceError(BlastSearchError):
    """Raised when a file handed to BLAST+ cannot be written."""

    def __init__(self, path: object, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"Could not write {path}: {error.strerror or error}")
