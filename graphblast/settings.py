"""
Search settings for GraphBlast.

Values are seeded from the project-root `configuration.py` when available,
otherwise from the defaults defined here. A `SearchSettings` instance lives for
the whole process and is shared by every search session.
"""

from dataclasses import dataclass, field
from importlib import import_module
from pathlib import Path
from typing import Any, List, Optional

try:
    _CFG = import_module("configuration")
except ImportError:
    _CFG = None


def _cfg_value(name: str, default: Any) -> Any:
    cfg = _CFG
    return getattr(cfg, name, default) if cfg else default


def _cfg_path(name: str) -> Optional[Path]:
    value = _cfg_value(name, None)
    return Path(value).expanduser() if value else None


DEFAULT_TIMEOUT_SECONDS = 60


def normalize_parameters(text: str) -> str:
    """Collapse runs of whitespace and trim, like QString::simplified."""
    return " ".join(text.split())


@dataclass
class SearchSettings:
    blast_parameters: str = field(default_factory=lambda: _cfg_value("BLAST_SEARCH_PARAMETERS", ""))
    timeout_seconds: int = field(
        default_factory=lambda: int(_cfg_value("BLAST_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
    )
    makeblastdb_command: str = field(default_factory=lambda: _cfg_value("MAKEBLASTDB_COMMAND", "makeblastdb"))
    blastn_command: str = field(default_factory=lambda: _cfg_value("BLASTN_COMMAND", "blastn"))
    extra_tool_dirs: List[str] = field(
        default_factory=lambda: [str(Path(p).expanduser()) for p in _cfg_value("EXTRA_TOOL_DIRS", [])]
    )
    temp_dir: Optional[Path] = field(default_factory=lambda: _cfg_path("BLAST_TEMP_DIR"))
    remembered_path: Optional[Path] = field(default_factory=lambda: _cfg_path("DEFAULT_BROWSE_DIR"))

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {self.timeout_seconds}")

    def remember_directory(self, picked_file: Path) -> None:
        """Keep the directory of a file the user just opened for the next file dialog."""
        self.remembered_path = Path(picked_file).resolve().parent
