"""
Settings — Default configuration values for the completed work extractor.

The orchestrator uses DEFAULT_SETTINGS as fallback values when environment
variables are not set. The actual configuration is loaded from .env at
runtime; these defaults make the extractor usable with only a token set.

Configuration precedence (highest to lowest):
  1. CLI flags (--source, --start-date, --end-date, --output-dir, --no-json, --no-csv, --debug)
  2. Environment variables (from .env file)
  3. DEFAULT_SETTINGS (this file)

Settings reference:
  LINEAR_API_URL          Linear GraphQL endpoint
  GITHUB_GRAPHQL_URL      GitHub GraphQL endpoint
  START_DATE / END_DATE   Inclusive extraction window (RFC 3339)
  GITHUB_SEARCH_QUERY     Overrides the derived "is:pr author:@me is:merged merged:<start>..<end>"
  SOURCES                 Comma-separated sources to run (linear, github)
  RUN_LABEL               Suffix of the per-run output folder name
  OUTPUT_DIR              Where to write exports (default: ./output)
  OUTPUT_RETENTION_DAYS   How many days to keep old run folders (0 = keep forever)
  SAVE_JSON / SAVE_CSV    Whether to write each export format
  REQUEST_TIMEOUT         Seconds allowed for one GraphQL request, start to full read
  DEBUG                   Whether to print verbose output

Credentials (LINEAR_API_KEY, GITHUB_TOKEN) have no defaults and are only
required for the sources being run.
"""

RUN_LABEL = "completed_work"

DEFAULT_SETTINGS = {
    "LINEAR_API_URL": "https://api.linear.app/graphql",
    "GITHUB_GRAPHQL_URL": "https://api.github.com/graphql",
    "START_DATE": "2025-01-01T00:00:00.000Z",
    "END_DATE": "2026-02-28T23:59:59.999Z",
    "GITHUB_SEARCH_QUERY": "",
    "SOURCES": "linear,github",
    "RUN_LABEL": RUN_LABEL,
    "OUTPUT_DIR": "./output",
    "OUTPUT_RETENTION_DAYS": 30,
    "SAVE_JSON": True,
    "SAVE_CSV": True,
    "REQUEST_TIMEOUT": 30,
    "DEBUG": False,
}
