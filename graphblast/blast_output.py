"""
Reader for blastn tabular output (-outfmt 6).

Columns: qseqid sseqid pident length mismatch gapopen qstart qend sstart send evalue bitscore.
Only the query name, node label, the two spans and the e-value are kept.
"""

import logging
from dataclasses import dataclass
from typing import List

from .errors import MalformedRecordError
from .graph import node_number_from_label

logger = logging.getLogger(__name__)

QUERY_NAME_COL = 0
NODE_LABEL_COL = 1
QUERY_START_COL = 6
QUERY_END_COL = 7
NODE_START_COL = 8
NODE_END_COL = 9
EVALUE_COL = 10
MIN_COLUMNS = EVALUE_COL + 1


@dataclass
class AlignmentRecord:
    query_name: str
    node_label: str
    node_number: int
    query_start: int
    query_end: int
    node_start: int
    node_end: int
    e_value: str

    @property
    def forward_strand(self) -> bool:
        return self.node_start <= self.node_end


def _to_int(value: str, column: str, line_number: int, line: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise MalformedRecordError(line_number, line, f"{column} {value!r} is not an integer") from None


def parse_blast_line(line: str, line_number: int = 1) -> AlignmentRecord:
    """Read one tabular line. Raises MalformedRecordError if columns are missing or unreadable."""
    parts = line.split("\t")
    if len(parts) < MIN_COLUMNS:
        raise MalformedRecordError(
            line_number, line, f"expected at least {MIN_COLUMNS} tab-separated columns, found {len(parts)}"
        )
    node_label = parts[NODE_LABEL_COL]
    try:
        node_number = node_number_from_label(node_label)
    except ValueError as exc:
        raise MalformedRecordError(line_number, line, str(exc)) from None
    return AlignmentRecord(
        query_name=parts[QUERY_NAME_COL],
        node_label=node_label,
        node_number=node_number,
        query_start=_to_int(parts[QUERY_START_COL], "query start", line_number, line),
        query_end=_to_int(parts[QUERY_END_COL], "query end", line_number, line),
        node_start=_to_int(parts[NODE_START_COL], "node start", line_number, line),
        node_end=_to_int(parts[NODE_END_COL], "node end", line_number, line),
        e_value=parts[EVALUE_COL],
    )


def parse_blast_output(text: str) -> List[AlignmentRecord]:
    """
    Parse the full stdout of blastn into forward-strand alignment records.

    Blank lines are ignored and an output without any line is simply "no hits".
    Records whose node span runs backwards (reverse strand) are dropped silently.
    Any malformed line aborts the whole parse with MalformedRecordError.
    """
    records: List[AlignmentRecord] = []
    lines = [(idx, line.rstrip("\r")) for idx, line in enumerate(text.split("\n"), start=1)]
    lines = [(idx, line) for idx, line in lines if line.strip()]
    if not lines:
        logger.debug("BLAST output is empty: no hits")
        return records

    reverse = 0
    for line_number, line in lines:
        parts = line.split("\t")
        # Strand is checked before the label so reverse hits never abort the batch.
        if len(parts) >= MIN_COLUMNS:
            start = _to_int(parts[NODE_START_COL], "node start", line_number, line)
            end = _to_int(parts[NODE_END_COL], "node end", line_number, line)
            if start > end:
                reverse += 1
                continue
        records.append(parse_blast_line(line, line_number))

    logger.debug("Parsed %d forward-strand records, skipped %d reverse-strand", len(records), reverse)
    return records
