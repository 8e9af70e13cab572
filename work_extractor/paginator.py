"""
Pagination Driver — Cursor pagination over a PaginatedSource.

fetch_all() calls the GraphQL client once per page, strictly in sequence: the
next cursor is only known once the previous response has been parsed.

    cursor = None
    loop:
        variables = base_variables + {after: cursor}
        page = source.extract_page(client.send(...).data)
        accumulator += page.items         (append-only, no deduplication)
        stop if not page.marker.has_next_page
        cursor = page.marker.end_cursor

Failures are fail-fast: the first TransportError, ProtocolStatusError,
SchemaError or RemoteDomainError propagates and the partial accumulator is
discarded. There is no retry and no page limit.
"""

from typing import Any, List, Mapping

from .graphql_client import GraphQLClient
from .models import QueryEnvelope
from .sources.base import PaginatedSource


def fetch_all(
    client: GraphQLClient,
    source: PaginatedSource,
    base_variables: Mapping[str, Any],
) -> List[Any]:
    """Fetch every page of a source and return the raw records in order.

    Args:
        client: A GraphQL client already configured with the source's
            endpoint and credential.
        source: The source providing the query and page extraction.
        base_variables: Query variables other than the cursor (page size,
            date window or search string).

    Returns:
        All raw records across all pages, in fetch order.

    Raises:
        ExtractionError: The first failure encountered (see errors.py).
    """
    accumulated: List[Any] = []
    cursor = None

    while True:
        variables = dict(base_variables)
        variables[source.cursor_variable] = cursor

        response = client.send(QueryEnvelope(query=source.query, variables=variables))
        response.raise_for_errors()

        page = source.extract_page(response.data)
        accumulated.extend(page.items)

        if page.total_count is not None:
            print(f"  Fetched {len(page.items)} {source.item_noun} "
                  f"(total: {len(accumulated)} / {page.total_count})")
        else:
            print(f"  Fetched {len(page.items)} {source.item_noun} (total: {len(accumulated)})")

        if not page.marker.has_next_page:
            return accumulated
        cursor = page.marker.end_cursor
