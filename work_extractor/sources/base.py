"""
Source definitions — The capability set of a "paginatable GraphQL source".

Linear and GitHub differ only in data: which query to send, how to build its
variables, where the page lives in the response, which items to keep, and how
to flatten an item for export. PaginatedSource bundles those pieces so that
the fetch, filter and project pipeline is written once.

This module also holds the lenient field readers the per-source parsers use.
The readers follow one rule: required scalars fall back to an empty value,
optional values fall back to None, and only structural problems (a missing
connection, a node that is not an object) raise SchemaError.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..errors import SchemaError
from ..formatting import format_month_range
from ..models import Page, PageMarker

PAGE_SIZE = 100


@dataclass(frozen=True)
class DateRange:
    """Inclusive extraction window, as RFC 3339 strings."""

    start: str
    end: str

    @property
    def start_day(self) -> str:
        return self.start[:10]

    @property
    def end_day(self) -> str:
        return self.end[:10]

    def display(self) -> str:
        return format_month_range(self.start, self.end)


@dataclass(frozen=True)
class TableColumn:
    """One console table column: header, fixed width and a cell renderer."""

    header: str
    width: int
    value: Callable[[Any], str]


@dataclass(frozen=True)
class PaginatedSource:
    """Everything the generic pipeline needs to know about one API.

    Attributes:
        name: Short identifier used on the CLI and in results ("linear").
        title: Banner heading for console output.
        item_noun: Plural noun for progress lines ("issues").
        summary_label: Noun for the summary total ("completed issues").
        endpoint_setting: Settings key holding the GraphQL URL.
        token_setting: Settings key holding the credential.
        query: The fixed GraphQL query text.
        build_variables: Builds the base variables (page size, date window or
            search string). The cursor variable is added by the driver.
        extract_page: Turns the "data" object of one response into a Page.
        keep: Post-fetch predicate; items for which it is False are dropped.
        project: Raw record -> flat export record. Pure and total.
        csv_header: Fixed CSV header row.
        json_filename, csv_filename: Export file names inside the run folder.
        auth_scheme: Authorization prefix ("Bearer") or None for a bare token.
        user_agent: User-Agent header, when the API requires one.
        search_query_setting: Settings key of a search string that replaces the
            date window, for sources that accept one.
        cursor_variable: Name of the cursor variable in the query.
        table_columns: Console table layout.
        table_rule_width: Width of the "=" rule framing the table.
        summary_groups: (heading, key function) pairs counted in the summary.
        summary_totals: Extra summary lines computed from the items.
        token_help: Instructions printed when the credential is missing.
    """

    name: str
    title: str
    item_noun: str
    endpoint_setting: str
    token_setting: str
    query: str
    build_variables: Callable[..., Dict[str, Any]]
    extract_page: Callable[[Mapping[str, Any]], Page]
    keep: Callable[[Any], bool]
    project: Callable[[Any], Any]
    csv_header: Tuple[str, ...]
    json_filename: str
    csv_filename: str
    summary_label: str = ""
    auth_scheme: Optional[str] = None
    user_agent: Optional[str] = None
    search_query_setting: Optional[str] = None
    cursor_variable: str = "after"
    table_columns: Tuple[TableColumn, ...] = ()
    table_rule_width: int = 120
    summary_groups: Tuple[Tuple[str, Callable[[Any], str]], ...] = ()
    summary_totals: Optional[Callable[[Sequence[Any]], List[str]]] = None
    token_help: Tuple[str, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Lenient field readers
# ---------------------------------------------------------------------------

def require_object(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise SchemaError(f"Expected {what} to be an object, got {type(value).__name__}")
    return value


def require_list(value: Any, what: str) -> List[Any]:
    if not isinstance(value, list):
        raise SchemaError(f"Expected {what} to be a list, got {type(value).__name__}")
    return value


def text_field(node: Mapping[str, Any], key: str) -> str:
    value = node.get(key)
    return value if isinstance(value, str) else ""


def optional_text(node: Mapping[str, Any], key: str) -> Optional[str]:
    value = node.get(key)
    return value if isinstance(value, str) else None


def int_field(node: Mapping[str, Any], key: str) -> int:
    value = node.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


def optional_int(node: Mapping[str, Any], key: str) -> Optional[int]:
    """Integer value, accepting integral floats (Linear sends Float scalars)."""
    value = node.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value if isinstance(value, int) else None


def optional_number(node: Mapping[str, Any], key: str) -> Optional[float]:
    value = node.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def optional_object(node: Mapping[str, Any], key: str) -> Optional[Dict[str, Any]]:
    value = node.get(key)
    return value if isinstance(value, dict) else None


def object_field(node: Mapping[str, Any], key: str) -> Dict[str, Any]:
    return optional_object(node, key) or {}


def total_count(node: Mapping[str, Any], key: str) -> int:
    return int_field(object_field(node, key), "totalCount")


def label_names(node: Mapping[str, Any]) -> Tuple[str, ...]:
    """Names from a ``labels { nodes { name } }`` block, in server order."""
    nodes = object_field(node, "labels").get("nodes")
    if not isinstance(nodes, list):
        return ()
    return tuple(text_field(n, "name") for n in nodes if isinstance(n, dict))


def read_page_marker(connection: Mapping[str, Any]) -> PageMarker:
    """Read ``pageInfo`` from a connection object.

    Raises:
        SchemaError: If pageInfo is missing, or claims another page without
            giving a cursor to reach it.
    """
    page_info = require_object(connection.get("pageInfo"), "pageInfo")
    has_next = page_info.get("hasNextPage") is True
    end_cursor = optional_text(page_info, "endCursor")
    if has_next and not end_cursor:
        raise SchemaError("pageInfo reports another page but no endCursor")
    return PageMarker(has_next_page=has_next, end_cursor=end_cursor if has_next else None)
