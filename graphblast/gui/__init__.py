"""
Entry point for the GraphBlast GUI.

Exposes a convenient `launch()` function that opens the BLAST search window:
open a FASTA of graph nodes, build the BLAST database, load queries, run blastn
and browse the per-query hit counts and the hit table.
"""

from .app import launch

__all__ = ["launch"]
