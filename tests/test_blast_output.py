"""Unit tests for reading blastn tabular output."""

import pytest

from graphblast.blast_output import parse_blast_line, parse_blast_output
from graphblast.errors import MalformedRecordError

from conftest import blast_line


class TestParseBlastLine:
    def test_reference_line(self):
        rec = parse_blast_line("Q1\tNODE_7_x\t.\t.\t.\t.\t10\t20\t5\t50\t1e-10")

        assert rec.query_name == "Q1"
        assert rec.node_label == "NODE_7_x"
        assert rec.node_number == 7
        assert (rec.query_start, rec.query_end) == (10, 20)
        assert (rec.node_start, rec.node_end) == (5, 50)
        assert rec.e_value == "1e-10"
        assert rec.forward_strand

    def test_score_metric_kept_verbatim(self):
        rec = parse_blast_line(blast_line("Q1", "NODE_12_length_150", 1, 30, 1, 30, evalue="0.0"))
        assert rec.e_value == "0.0"

    def test_trailing_columns_ignored(self):
        rec = parse_blast_line(blast_line("Q1", "NODE_7", 1, 2, 3, 4) + "\textra\tcolumns")
        assert rec.node_number == 7

    def test_too_few_columns(self):
        with pytest.raises(MalformedRecordError) as exc_info:
            parse_blast_line("Q1\tNODE_7\t1\t2", line_number=4)
        assert exc_info.value.line_number == 4
        assert "columns" in exc_info.value.reason

    def test_label_without_number(self):
        with pytest.raises(MalformedRecordError):
            parse_blast_line(blast_line("Q1", "contig", 1, 2, 3, 4))

    def test_non_numeric_label(self):
        with pytest.raises(MalformedRecordError):
            parse_blast_line(blast_line("Q1", "NODE_seven_x", 1, 2, 3, 4))

    def test_non_integer_coordinate(self):
        line = "Q1\tNODE_7\t.\t.\t.\t.\tten\t20\t5\t50\t1e-10"
        with pytest.raises(MalformedRecordError):
            parse_blast_line(line)


class TestParseBlastOutput:
    def test_empty_output_is_no_hits(self):
        assert parse_blast_output("") == []
        assert parse_blast_output("\n\n") == []

    def test_reverse_strand_dropped(self):
        assert parse_blast_output("Q1\tNODE_7_x\t.\t.\t.\t.\t10\t20\t50\t5\t1e-10\n") == []

    def test_strand_filter_over_mixed_records(self):
        lines = [
            blast_line("Q1", "NODE_7", 1, 10, 1, 10),
            blast_line("Q1", "NODE_7", 1, 10, 10, 1),
            blast_line("Q2", "NODE_12", 5, 9, 40, 44),
            blast_line("Q2", "NODE_12", 5, 9, 44, 40),
            blast_line("Q3", "NODE_-3", 1, 1, 2, 2),
        ]
        records = parse_blast_output("\n".join(lines) + "\n")

        assert [r.node_number for r in records] == [7, 12, -3]
        assert all(r.node_start <= r.node_end for r in records)

    def test_blank_and_crlf_lines(self):
        text = "\r\n" + blast_line("Q1", "NODE_7", 1, 10, 1, 10) + "\r\n\r\n"
        records = parse_blast_output(text)
        assert len(records) == 1
        assert records[0].e_value == "1e-10"

    def test_malformed_line_aborts_whole_output(self):
        text = "\n".join([blast_line("Q1", "NODE_7", 1, 10, 1, 10), "garbage line", blast_line("Q1", "NODE_12", 1, 5, 1, 5)])
        with pytest.raises(MalformedRecordError) as exc_info:
            parse_blast_output(text)
        assert exc_info.value.line_number == 2

    def test_reverse_strand_checked_before_label(self):
        records = parse_blast_output(blast_line("Q1", "weird", 1, 10, 10, 1))
        assert records == []
