"""
User-tunable settings for GraphBlast.

Place this file at the project root and tweak values as needed; `graphblast.settings`
and the GUI theme import it and fall back to their own defaults for anything missing.
All paths can be str or pathlib.Path.
"""

from pathlib import Path

# ==== BLAST+ tools ====
# Executable names (or absolute paths) of the database builder and the search tool.
MAKEBLASTDB_COMMAND = "makeblastdb"
BLASTN_COMMAND = "blastn"

# Extra blastn arguments appended verbatim to every search, e.g. "-evalue 0.01".
BLAST_SEARCH_PARAMETERS = ""

# Seconds to wait for makeblastdb and for blastn before the process is killed.
BLAST_TIMEOUT_SECONDS = 60

# Directories searched for the tools before PATH, in this order.
# macOS always adds /usr/local/bin, /opt/local/bin, ~/bin and /usr/local/ncbi/blast/bin after these.
EXTRA_TOOL_DIRS: list = []

# Working directory for all_nodes.fasta, queries.fasta and the database files.
# None creates a fresh temporary directory per session.
BLAST_TEMP_DIR: str | Path | None = None

# ==== File dialog defaults ====
# Starting directory when opening query FASTA files; None uses the last visited dir.
DEFAULT_BROWSE_DIR: str | Path | None = None

# ==== GUI theme/layout (mirrors graphblast/gui/theme.py) ====
FONT_CANDIDATES = [
    "Segoe UI",
    "PingFang SC",
    "Noto Sans",
    "Arial",
    "Helvetica",
]

# Font size scaling; 1.0 keeps original size.
FONT_SCALING = 1.25

# Control size scaling; affects button height and icon size.
UI_SCALING = 1.25

# Initial window size (pixels).
WINDOW_WIDTH = 1600
WINDOW_HEIGHT = 1000
