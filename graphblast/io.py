from pathlib import Path
from typing import Iterable, List, Mapping, Tuple, Union

try:
    import mappy as mp
except ImportError as exc:
    raise ImportError(
        "mappy (minimap2 Python bindings) is required. Install with `pip install mappy`."
    ) from exc


FastaRecords = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def read_fasta_records(path: Path) -> List[Tuple[str, str]]:
    """
    Load (header, sequence) pairs from a FASTA/FASTQ file in file order, using mappy.fastx_read.
    The header is the full definition line (name plus comment) so callers can normalise it themselves.
    Duplicate names are kept.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"FASTA file not found: {path}")
    records: List[Tuple[str, str]] = []
    for name, seq, _, comment in mp.fastx_read(str(path), read_comment=True):
        header = f"{name} {comment}" if comment else name
        records.append((header, seq))
    return records


def format_fasta(records: FastaRecords) -> str:
    """FASTA text for a name->sequence mapping or (name, sequence) pairs, 80 bases per line."""
    items = records.items() if isinstance(records, Mapping) else records
    lines: List[str] = []
    for name, seq in items:
        lines.append(f">{name}")
        lines.extend(seq[i : i + 80] for i in range(0, len(seq), 80))
    return "".join(line + "\n" for line in lines)


def write_fasta(records: FastaRecords, path: Path) -> None:
    """Write a simple FASTA file from a name->sequence mapping or (name, sequence) pairs."""
    Path(path).write_text(format_fasta(records))
