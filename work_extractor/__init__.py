"""
work_extractor — Completed work extraction from GraphQL APIs.

This package implements the fetch-filter-project pipeline and the surrounding
presentation layer. Each module handles one concern:

  graphql_client.py   HTTP transport and GraphQL envelope parsing
  graphql_queries.py  The fixed GraphQL query texts
  models.py           Query/response envelopes and page markers
  errors.py           Failure taxonomy
  paginator.py        Cursor pagination driver
  filters.py          Post-fetch filter
  sources/            Per-API definitions (Linear issues, GitHub pull requests)
  pipeline.py         fetch -> filter -> project for one source
  presenters.py       Console table and summary, JSON and CSV export
  output_manager.py   Per-run output folders and retention cleanup
  orchestrator.py     Runs each configured source end to end
"""

from .errors import (
    ExtractionError,
    ProtocolStatusError,
    RemoteDomainError,
    SchemaError,
    TransportError,
)
from .filters import filter_items
from .graphql_client import GraphQLClient, parse_envelope
from .models import GraphQLErrorDetail, Page, PageMarker, QueryEnvelope, ResponseEnvelope
from .orchestrator import ExtractionOrchestrator
from .output_manager import OutputManager
from .paginator import fetch_all
from .pipeline import Extraction, extract
from .sources import GITHUB_SOURCE, LINEAR_SOURCE, SOURCES, DateRange, PaginatedSource
