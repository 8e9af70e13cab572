"""
GraphQL Client — The transport layer shared by every work-item source.

This module is responsible for all HTTP communication with the GraphQL APIs
(Linear and GitHub). One call to send() performs exactly one POST:

    POST <endpoint>
    Headers: Content-Type: application/json
             Authorization: <credential, formatted per source>
    Body:    {"query": "...", "variables": {...}}

and classifies the outcome:

  - network failure or timeout        -> TransportError
  - non-2xx HTTP status               -> ProtocolStatusError (status + raw body)
  - body is not an envelope object    -> SchemaError
  - body carries a GraphQL errors list -> returned as a failed ResponseEnvelope;
                                         callers use raise_for_errors()

Authorization header format:
    Linear expects the bare personal API key; GitHub expects "Bearer <token>".
    The client does not hardcode either: the source passes auth_scheme
    ("Bearer" or None) when it builds the client.

Timeout:
    The budget (default 30 seconds) runs from the start of the request to the
    end of the body read. requests' own timeout only bounds each socket
    operation, so the body is streamed and the deadline checked per chunk.

Pipeline context:
    Used by the Pagination Driver (work_extractor.paginator) once per page.
"""

import json
import time
from typing import Any, Dict, Optional

import requests

from .errors import ProtocolStatusError, SchemaError, TransportError
from .models import GraphQLErrorDetail, QueryEnvelope, ResponseEnvelope

DEFAULT_TIMEOUT = 30.0
_CHUNK_SIZE = 8192


def _parse_error(raw: Any) -> GraphQLErrorDetail:
    if not isinstance(raw, dict):
        return GraphQLErrorDetail(message=str(raw))
    path = raw.get("path")
    return GraphQLErrorDetail(
        message=str(raw.get("message", raw)),
        path=tuple(path) if isinstance(path, list) else None,
    )


def parse_envelope(text: str) -> ResponseEnvelope:
    """Parse a response body into a ResponseEnvelope.

    Args:
        text: The raw response body.

    Returns:
        A ResponseEnvelope. If the body carries any GraphQL errors, the
        envelope is a failure (``ok`` is False) and ``data`` may be None.

    Raises:
        SchemaError: If the body is not JSON, not an object, has a non-list
            "errors" member, or has no "data" object and no errors.
    """
    try:
        payload = json.loads(text)
    except ValueError as e:
        raise SchemaError(f"Failed to parse response body as JSON: {e}") from e

    if not isinstance(payload, dict):
        raise SchemaError(f"Expected a JSON object, got {type(payload).__name__}")

    raw_errors = payload.get("errors") or []
    if not isinstance(raw_errors, list):
        raise SchemaError("Response 'errors' member is not a list")
    errors = tuple(_parse_error(e) for e in raw_errors)

    data = payload.get("data")
    if errors:
        return ResponseEnvelope(
            data=data if isinstance(data, dict) else None,
            errors=errors,
        )

    if not isinstance(data, dict):
        raise SchemaError("Response has no 'data' object")
    return ResponseEnvelope(data=data)


class GraphQLClient:
    """Client for a single GraphQL endpoint.

    Manages a requests.Session with the credential header attached to every
    request. All API calls for one source go through this single session.

    Attributes:
        endpoint: The GraphQL URL (e.g., "https://api.linear.app/graphql").
        auth_scheme: Prefix for the Authorization header ("Bearer"), or None
            to send the bare token.
        user_agent: Optional User-Agent header (required by GitHub).
        timeout: Budget in seconds for one request, start to full body read.
        debug: If True, print verbose request/response details.
    """

    def __init__(
        self,
        endpoint: str,
        token: str,
        auth_scheme: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        debug: bool = False,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            endpoint: GraphQL URL.
            token: The API credential. Never printed.
            auth_scheme: "Bearer" for GitHub, None for Linear.
            user_agent: Optional User-Agent value.
            timeout: Per-request budget in seconds.
            debug: Enable verbose output.
            session: An existing requests.Session (a new one if omitted).
        """
        self.endpoint = endpoint
        self.auth_scheme = auth_scheme
        self.user_agent = user_agent
        self.timeout = timeout
        self.debug = debug
        self._token = token
        self._session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        authorization = f"{self.auth_scheme} {self._token}" if self.auth_scheme else self._token
        headers = {
            "Content-Type": "application/json",
            "Authorization": authorization,
        }
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers

    def send(self, envelope: QueryEnvelope) -> ResponseEnvelope:
        """Send one GraphQL request and parse the response.

        Args:
            envelope: The query text and variables.

        Returns:
            The parsed ResponseEnvelope. A response carrying GraphQL errors is
            returned, not raised; call raise_for_errors() on it.

        Raises:
            TransportError: If the request could not complete in time.
            ProtocolStatusError: If the status code is not 2xx.
            SchemaError: If the body is not a GraphQL envelope.
        """
        if self.debug:
            print(f"  POST {self.endpoint} ({len(envelope.query)} chars, "
                  f"variables: {sorted(envelope.variables)})")

        started = time.monotonic()
        try:
            response = self._session.post(
                self.endpoint,
                json=envelope.to_body(),
                headers=self._headers(),
                timeout=self.timeout,
                stream=True,
            )
            try:
                self._check_deadline(started, "waiting for the response")
                raw = self._read_body(response, started)
            finally:
                response.close()
        except requests.Timeout as e:
            raise TransportError(
                f"Request timed out after {self.timeout:g}s: {e}", url=self.endpoint
            ) from e
        except requests.RequestException as e:
            raise TransportError(f"Failed to send request: {e}", url=self.endpoint) from e

        text = raw.decode("utf-8", errors="replace")
        status_code = response.status_code

        if self.debug:
            print(f"  Response: HTTP {status_code}, {len(raw)} bytes "
                  f"in {time.monotonic() - started:.2f}s")

        if not 200 <= status_code < 300:
            raise ProtocolStatusError(status_code, text, url=self.endpoint)

        return parse_envelope(text)

    def _check_deadline(self, started: float, stage: str) -> None:
        if time.monotonic() - started > self.timeout:
            raise TransportError(
                f"Request timed out after {self.timeout:g}s {stage}",
                url=self.endpoint,
            )

    def _read_body(self, response, started: float) -> bytes:
        """Read the whole body, enforcing the budget on every read including the last."""
        chunks = []
        for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
            self._check_deadline(started, "while reading the response")
            chunks.append(chunk)
        self._check_deadline(started, "while reading the response")
        return b"".join(chunks)
