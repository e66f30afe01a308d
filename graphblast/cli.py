"""
Minimal CLI wrapper so users can run a graph BLAST search without the GUI.
"""
import argparse
import logging
import sys
from pathlib import Path

from .graph import NodeGraph
from .hits import HIT_TABLE_HEADERS
from .pipeline import SearchPipeline
from .queries import QUERY_TABLE_HEADERS
from .session import SearchSession
from .settings import SearchSettings
from .workspace import SearchWorkspace


def _say_stderr(msg: str) -> None:
    print(msg, file=sys.stderr)


def _query_arg(text: str):
    name, sep, seq = text.partition("=")
    name, seq = name.strip(), "".join(seq.split())
    if not sep or not name or not seq:
        raise argparse.ArgumentTypeError(f"expected NAME=SEQUENCE, got {text!r}")
    return name, seq


def _build_pipeline(args) -> SearchPipeline:
    settings = SearchSettings()
    if args.timeout is not None:
        settings.timeout_seconds = args.timeout
    graph = NodeGraph.from_fasta(args.nodes_fasta)
    session = SearchSession(graph, SearchWorkspace(args.workdir or settings.temp_dir))
    return SearchPipeline(session, settings, say=_say_stderr)


def main(argv=None):
    parser = argparse.ArgumentParser(description="GraphBlast: BLAST queries against assembly graph nodes")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("nodes_fasta", type=Path, help="FASTA of graph nodes, headers NODE_<number>...")
    common.add_argument("--timeout", type=int, default=None, help="seconds allowed per BLAST step")
    common.add_argument("--workdir", type=Path, default=None, help="keep BLAST files in this directory")

    sub.add_parser("build-db", parents=[common], help="run makeblastdb on the graph nodes")

    p_search = sub.add_parser("search", parents=[common], help="build the database and run blastn")
    p_search.add_argument("queries_fasta", type=Path, nargs="?", default=None)
    p_search.add_argument(
        "--query",
        dest="queries",
        action="append",
        default=[],
        metavar="NAME=SEQ",
        type=_query_arg,
        help="add one query by hand (repeatable)",
    )
    p_search.add_argument("--params", default=None, help='extra blastn arguments, e.g. "-evalue 0.01"')
    p_search.add_argument("--summary", action="store_true", help="print per-query hit counts instead of hits")

    p_gui = sub.add_parser("gui", help="open the search window")
    p_gui.add_argument("nodes_fasta", type=Path, nargs="?", default=None)

    args = parser.parse_args(argv)
    if args.cmd == "search" and args.queries_fasta is None and not args.queries:
        parser.error("search needs QUERIES_FASTA or at least one --query NAME=SEQ")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "gui":
        from .gui import launch

        launch(args.nodes_fasta)
        return 0

    pipeline = _build_pipeline(args)
    session = pipeline.session
    try:
        # A --workdir database built from this same graph is reused.
        if not session.database_ready:
            result = pipeline.build_database()
            if not result.ok:
                return 1
        if args.cmd == "build-db":
            print("Database:", session.workspace.database_path)
            return 0

        if args.queries_fasta is not None:
            session.load_queries_from_fasta(args.queries_fasta)
        for name, seq in args.queries:
            session.add_query(name, seq)
        result = pipeline.run_search(args.params)
        if not result.ok:
            return 1
        _say_stderr(f"blastn command: {result.cmd}")
        if args.summary:
            print("\t".join(QUERY_TABLE_HEADERS))
            for query in session.queries():
                print("\t".join(query.table_row()))
        else:
            print("\t".join(HIT_TABLE_HEADERS))
            for hit in session.hits():
                print("\t".join(hit.table_row()))
        return 0
    finally:
        if session.workspace.owned:
            session.close()


if __name__ == "__main__":
    sys.exit(main())
