import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

_WHITESPACE = re.compile(r"\s")

QUERY_TABLE_HEADERS = ["Query name", "Query length", "Hits"]


def clean_query_name(name: str) -> str:
    """
    Replace whitespace with underscores and strip trailing dots.
    blastn drops trailing dots from query names in its output, so keeping them
    would make the hit impossible to match back to its query.
    """
    return _WHITESPACE.sub("_", name).rstrip(".")


@dataclass(eq=False)
class Query:
    name: str
    sequence: str
    hits: int = 0
    searched: bool = False

    @property
    def length(self) -> int:
        return len(self.sequence)

    def hits_text(self) -> str:
        """Hit count for display; '-' until a search has covered this query."""
        return f"{self.hits:,}" if self.searched else "-"

    def table_row(self) -> List[str]:
        return [self.name, f"{self.length:,}", self.hits_text()]


class QueryRegistry:
    """Ordered collection of queries. Duplicate names are tolerated; lookups return the first match."""

    def __init__(self) -> None:
        self._queries: List[Query] = []

    def add_query(self, name: str, sequence: str) -> Query:
        query = Query(clean_query_name(name), sequence)
        self._queries.append(query)
        return query

    def remove_all(self) -> None:
        self._queries.clear()

    def find_by_name(self, name: str) -> Optional[Query]:
        for query in self._queries:
            if query.name == name:
                return query
        return None

    def mark_searched(self) -> None:
        for query in self._queries:
            query.searched = True

    def clear_search_results(self) -> None:
        for query in self._queries:
            query.hits = 0
            query.searched = False

    def __iter__(self) -> Iterator[Query]:
        return iter(list(self._queries))

    def __len__(self) -> int:
        return len(self._queries)
