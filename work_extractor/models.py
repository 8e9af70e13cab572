"""
Protocol models — Request/response envelopes and page markers.

These are the shapes that travel between the Transport Client and the
Pagination Driver. They know nothing about issues or pull requests; the
per-source record types live in work_extractor.sources.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import RemoteDomainError

PathElement = Union[str, int]


@dataclass(frozen=True)
class QueryEnvelope:
    """A GraphQL query text plus its variables, built once per page request."""

    query: str
    variables: Mapping[str, Any] = field(default_factory=dict)

    def to_body(self) -> Dict[str, Any]:
        return {"query": self.query, "variables": dict(self.variables)}


@dataclass(frozen=True)
class GraphQLErrorDetail:
    message: str
    path: Optional[Tuple[PathElement, ...]] = None

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} (path: {'.'.join(str(p) for p in self.path)})"
        return self.message


@dataclass(frozen=True)
class ResponseEnvelope:
    """A parsed GraphQL response.

    Either ``data`` holds the success payload, or ``errors`` holds at least one
    protocol error. Any error makes the envelope a failure, whatever the HTTP
    status was.

    Attributes:
        data: The "data" object of the response (may be None on failure).
        errors: The "errors" list of the response, in the order received.
    """

    data: Optional[Dict[str, Any]] = None
    errors: Tuple[GraphQLErrorDetail, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise RemoteDomainError if the envelope carries protocol errors."""
        if not self.ok:
            raise RemoteDomainError(self.errors)


@dataclass(frozen=True)
class PageMarker:
    """Pagination metadata attached to each page (GraphQL ``pageInfo``)."""

    has_next_page: bool
    end_cursor: Optional[str] = None


@dataclass(frozen=True)
class Page:
    """One page of raw item records plus its marker.

    Attributes:
        items: The records of this page, in server order.
        marker: The has-more flag and next cursor.
        total_count: Server-reported total across all pages, when the API
            provides one (GitHub search ``issueCount``).
    """

    items: Tuple[Any, ...]
    marker: PageMarker
    total_count: Optional[int] = None
