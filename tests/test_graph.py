"""Unit tests for node labels, the in-memory graph and FASTA I/O."""

import pytest

from graphblast.graph import Node, NodeGraph, node_label, node_number_from_label
from graphblast.io import read_fasta_records, write_fasta


class TestNodeLabels:
    @pytest.mark.parametrize(
        "label,number",
        [
            ("NODE_7_x", 7),
            ("NODE_7", 7),
            ("NODE_42_length_100_cov_3.5", 42),
            ("contig_-5_rc", -5),
            ("NODE_9223372036854775807", 2**63 - 1),
        ],
    )
    def test_number_from_label(self, label, number):
        assert node_number_from_label(label) == number

    @pytest.mark.parametrize("label", ["NODE", "NODE_", "NODE_abc", "NODE_7x", "NODE_9223372036854775808"])
    def test_bad_labels(self, label):
        with pytest.raises(ValueError):
            node_number_from_label(label)

    def test_label_roundtrip(self):
        node = Node(12, "ACGTA")
        assert node.label == node_label(12, 5) == "NODE_12_length_5"
        assert node_number_from_label(node.label) == 12


class TestNodeGraph:
    def test_lookup(self, graph):
        assert graph.node_exists(7)
        assert not graph.node_exists(8)
        assert graph.get_node(12).length == 150
        assert [n.number for n in graph.nodes()] == [-3, 7, 12]

    def test_duplicate_numbers_rejected(self):
        with pytest.raises(ValueError):
            NodeGraph([Node(1, "A"), Node(1, "C")])

    def test_from_records(self):
        graph = NodeGraph.from_records([("NODE_3_length_4 cov=2", "ACGT"), ("NODE_4", "GG")])
        assert len(graph) == 2
        assert graph.get_node(3).sequence == "ACGT"


class TestFastaIO:
    def test_write_wraps_and_reads_back(self, tmp_path):
        path = tmp_path / "q.fasta"
        write_fasta([("first query", "A" * 100), ("second", "CCGG")], path)

        lines = path.read_text().splitlines()
        assert lines[0] == ">first query"
        assert len(lines[1]) == 80
        assert read_fasta_records(path) == [("first query", "A" * 100), ("second", "CCGG")]

    def test_write_accepts_mapping(self, tmp_path):
        path = tmp_path / "m.fasta"
        write_fasta({"n1": "ACGT"}, path)
        assert path.read_text() == ">n1\nACGT\n"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_fasta_records(tmp_path / "absent.fasta")

    def test_graph_from_fasta(self, tmp_path):
        path = tmp_path / "nodes.fasta"
        write_fasta([("NODE_1_length_4", "ACGT"), ("NODE_2_length_2", "TT")], path)

        graph = NodeGraph.from_fasta(path)
        assert graph.get_node(2).sequence == "TT"
