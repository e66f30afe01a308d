"""Unit tests for resolving alignment records into hits."""

import pytest

from graphblast.blast_output import parse_blast_output
from graphblast.errors import UnresolvableReferenceError
from graphblast.hits import apply_hit_counts, correlate_hits
from graphblast.queries import QueryRegistry

from conftest import blast_line


@pytest.fixture
def registry():
    reg = QueryRegistry()
    reg.add_query("Q1", "ACGT" * 10)
    reg.add_query("Q2", "GGCC" * 10)
    return reg


class TestCorrelateHits:
    def test_reference_hit(self, graph, registry):
        records = parse_blast_output("Q1\tNODE_7_x\t.\t.\t.\t.\t10\t20\t5\t50\t1e-10")
        hits = correlate_hits(records, graph, registry)

        assert len(hits) == 1
        hit = hits[0]
        assert hit.node is graph.get_node(7)
        assert hit.query is registry.find_by_name("Q1")
        assert (hit.node_start, hit.node_end) == (5, 50)
        assert (hit.query_start, hit.query_end) == (10, 20)
        assert hit.e_value == "1e-10"

    def test_counts_not_touched_until_applied(self, graph, registry):
        records = parse_blast_output(
            "\n".join([blast_line("Q1", "NODE_7", 1, 5, 1, 5), blast_line("Q1", "NODE_12", 1, 5, 1, 5)])
        )
        hits = correlate_hits(records, graph, registry)
        q1 = registry.find_by_name("Q1")
        assert q1.hits == 0

        apply_hit_counts(hits)
        assert q1.hits == 2
        assert registry.find_by_name("Q2").hits == 0

    def test_unknown_node_rejects_batch(self, graph, registry):
        lines = [blast_line("Q1", "NODE_7", 1, 5, i, i + 5) for i in range(1, 100)]
        lines.append(blast_line("Q1", "NODE_999", 1, 5, 1, 5))
        records = parse_blast_output("\n".join(lines))

        with pytest.raises(UnresolvableReferenceError) as exc_info:
            correlate_hits(records, graph, registry)
        assert exc_info.value.kind == "node"
        assert exc_info.value.reference == 999

    def test_unknown_query_rejects_batch(self, graph, registry):
        records = parse_blast_output(blast_line("Q3", "NODE_7", 1, 5, 1, 5))
        with pytest.raises(UnresolvableReferenceError) as exc_info:
            correlate_hits(records, graph, registry)
        assert exc_info.value.kind == "query"

    def test_table_row(self, graph, registry):
        records = parse_blast_output(blast_line("Q2", "NODE_12", 1, 1200, 3, 1500, evalue="2e-30"))
        hit = correlate_hits(records, graph, registry)[0]
        assert hit.table_row() == ["12", "150", "3", "1,500", "Q2", "1", "1,200", "2e-30"]
