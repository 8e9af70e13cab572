"""
Extraction Errors — Failure taxonomy for the fetch pipeline.

Every failure the Transport Client can produce is an ExtractionError, so the
orchestrator can catch one type per source and report it:

  TransportError       The HTTP call could not complete (connection, DNS, timeout).
  ProtocolStatusError  The API answered with a non-2xx status code.
  SchemaError          The body could not be parsed into the expected envelope
                       or page shape.
  RemoteDomainError    The body parsed, but carried a non-empty GraphQL
                       "errors" list (even under HTTP 200).

None of these are retried. The Pagination Driver surfaces the first one and
abandons the accumulated results.
"""

from typing import Optional, Sequence


class ExtractionError(RuntimeError):
    """Base class for all failures raised while fetching work items."""


class TransportError(ExtractionError):
    """The network call could not complete."""

    def __init__(self, message: str, *, url: str = ""):
        super().__init__(message)
        self.url = url


class ProtocolStatusError(ExtractionError):
    """The remote returned a non-success HTTP status code.

    Attributes:
        status_code: The HTTP status code.
        body: The raw response body text.
        url: The endpoint that was called.
    """

    def __init__(self, status_code: int, body: str, *, url: str = ""):
        super().__init__(f"API request failed with status {status_code}: {body}")
        self.status_code = status_code
        self.body = body
        self.url = url


class SchemaError(ExtractionError):
    """The response body did not have the expected shape."""


class RemoteDomainError(ExtractionError):
    """The GraphQL response carried one or more protocol errors.

    Attributes:
        errors: The GraphQLErrorDetail entries reported by the API, in order.
    """

    def __init__(self, errors: Sequence, message: Optional[str] = None):
        self.errors = tuple(errors)
        if message is None:
            message = "GraphQL errors: " + "; ".join(str(e) for e in self.errors)
        super().__init__(message)
