"""
Extraction pipeline — fetch, filter, project for one source.

    fetch_all()      -> every raw record the server returned
    filter_items()   -> the records the source's predicate keeps
    source.project() -> one flat export record per kept record

The filtered raw records are returned alongside the flat records because the
console table and summary read richer fields than the export shape carries.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from .filters import filter_items
from .graphql_client import GraphQLClient
from .paginator import fetch_all
from .sources.base import PaginatedSource


@dataclass(frozen=True)
class Extraction:
    """The result of one pipeline run.

    Attributes:
        source: The source that was extracted.
        fetched_count: Records returned by the server before filtering.
        items: Filtered raw records, in fetch order.
        records: Flat export records, one per item, same order.
    """

    source: PaginatedSource
    fetched_count: int
    items: Tuple[Any, ...]
    records: Tuple[Any, ...]

    @property
    def dropped_count(self) -> int:
        return self.fetched_count - len(self.items)


def extract(
    client: GraphQLClient,
    source: PaginatedSource,
    base_variables: Mapping[str, Any],
) -> Extraction:
    fetched = fetch_all(client, source, base_variables)
    kept = filter_items(fetched, source.keep)
    return Extraction(
        source=source,
        fetched_count=len(fetched),
        items=tuple(kept),
        records=tuple(source.project(item) for item in kept),
    )
