"""
Extraction Orchestrator — Runs each configured source end to end.

For every selected source (Linear, GitHub) the orchestrator performs:

  Step 1: FETCH
      Builds a GraphQLClient with the source's endpoint and credential format,
      then runs the pipeline: paginate every page, apply the post-fetch
      filter, project the kept records into flat export records.

  Step 2: PRESENT
      Prints the console table and the summary (counts per team/priority or
      per repository, line totals).

  Step 3: EXPORT
      Writes the JSON and CSV exports into the run's timestamped folder.
      The formats are independent: a failed JSON write is reported and the
      CSV write is still attempted.

A failed fetch aborts that source only (nothing is exported for it) and the
run as a whole is reported as failed. Run metadata is saved to
extraction_results.json next to the exports.

Configuration:
    Loaded from environment variables (typically via .env). Credentials:
    LINEAR_API_KEY for the linear source, GITHUB_TOKEN for the github source.
    See config/settings.py for everything else.

Typical usage:
    orchestrator = ExtractionOrchestrator(env_file="./.env")
    if orchestrator.validate_config():
        results = orchestrator.run()
        orchestrator.print_summary(results)
"""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from config import DEFAULT_SETTINGS

from .errors import ExtractionError
from .graphql_client import GraphQLClient
from .output_manager import OutputManager
from .pipeline import Extraction, extract
from .presenters import export_csv, export_json, print_banner, print_summary, print_table
from .sources import SOURCES
from .sources.base import DateRange, PaginatedSource

RESULTS_FILENAME = "extraction_results.json"


def _setting(key: str) -> str:
    return os.getenv(key, str(DEFAULT_SETTINGS[key]))


def _flag(key: str) -> bool:
    return _setting(key).lower() == "true"


def parse_source_names(value: str) -> List[str]:
    """Split a comma-separated source list ("linear, github"), keeping order."""
    names = []
    for part in value.split(","):
        name = part.strip().lower()
        if name and name not in names:
            names.append(name)
    return names


class ExtractionOrchestrator:
    """Orchestrates the fetch, present and export steps for each source.

    Attributes:
        credentials: Token per settings key (LINEAR_API_KEY, GITHUB_TOKEN).
        endpoints: GraphQL URL per settings key.
        start_date / end_date: Inclusive extraction window (RFC 3339).
        search_queries: Search string per settings key ("" = derived from dates).
        source_names: Sources to run, in order.
        save_json / save_csv: Which export formats to write.
        request_timeout: Seconds allowed per GraphQL request.
        debug: Whether to enable verbose output.
        output_manager: Handles the run folder and retention cleanup.
    """

    def __init__(self, env_file: str = "./.env"):
        """Load configuration from the environment.

        Args:
            env_file: Path to a .env file. If the file exists, it is loaded via
                      python-dotenv. Otherwise, falls back to system environment.
        """
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path)
            print(f"Loaded configuration from: {env_file}")
        else:
            print(f"Warning: {env_file} not found, using defaults/environment")

        self.credentials = {
            "LINEAR_API_KEY": os.getenv("LINEAR_API_KEY", ""),
            "GITHUB_TOKEN": os.getenv("GITHUB_TOKEN", ""),
        }
        self.endpoints = {
            "LINEAR_API_URL": _setting("LINEAR_API_URL"),
            "GITHUB_GRAPHQL_URL": _setting("GITHUB_GRAPHQL_URL"),
        }

        self.start_date = _setting("START_DATE")
        self.end_date = _setting("END_DATE")
        self.search_queries = {
            "GITHUB_SEARCH_QUERY": _setting("GITHUB_SEARCH_QUERY"),
        }
        self.source_names = parse_source_names(_setting("SOURCES"))

        self.save_json = _flag("SAVE_JSON")
        self.save_csv = _flag("SAVE_CSV")
        self.debug = _flag("DEBUG")
        self.request_timeout = float(_setting("REQUEST_TIMEOUT"))

        output_dir = _setting("OUTPUT_DIR")
        retention_days = int(_setting("OUTPUT_RETENTION_DAYS"))
        self.output_manager = OutputManager(output_dir, _setting("RUN_LABEL"), retention_days)

    @property
    def date_range(self) -> DateRange:
        return DateRange(start=self.start_date, end=self.end_date)

    @property
    def sources(self) -> List[PaginatedSource]:
        return [SOURCES[name] for name in self.source_names if name in SOURCES]

    def validate_config(self) -> bool:
        """Check that the selected sources exist and have credentials.

        Returns:
            True if the run can start. Otherwise prints every problem (with
            instructions for creating missing tokens) and returns False.
        """
        errors = []
        help_lines: List[str] = []

        if not self.source_names:
            errors.append("SOURCES is empty; choose at least one of: " + ", ".join(SOURCES))

        for name in self.source_names:
            source = SOURCES.get(name)
            if source is None:
                errors.append(f"Unknown source '{name}' (choose from: {', '.join(SOURCES)})")
                continue
            if not self.credentials.get(source.token_setting):
                errors.append(f"{source.token_setting} is required for the {name} source")
                help_lines.extend(source.token_help)

        if errors:
            print("\nConfiguration Errors:")
            for err in errors:
                print(f"  - {err}")
            if help_lines:
                print()
                for line in help_lines:
                    print(line)
            return False
        return True

    def build_client(self, source: PaginatedSource) -> GraphQLClient:
        return GraphQLClient(
            endpoint=self.endpoints[source.endpoint_setting],
            token=self.credentials[source.token_setting],
            auth_scheme=source.auth_scheme,
            user_agent=source.user_agent,
            timeout=self.request_timeout,
            debug=self.debug,
        )

    def run(self) -> Dict[str, Any]:
        """Run every selected source.

        Returns:
            A dict containing:
                - started_at/completed_at: ISO timestamps
                - config: date window and selected sources
                - sources: per-source outcome (see run_source())
                - success: True if every source fetched without error
                - results_path: Path to the saved run metadata (if any)
        """
        results: Dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "connector": "completed-work-extractor",
            "config": {
                "start_date": self.start_date,
                "end_date": self.end_date,
                "sources": self.source_names,
            },
            "sources": {},
            "success": False,
        }

        for source in self.sources:
            results["sources"][source.name] = self.run_source(source)

        results["success"] = bool(results["sources"]) and all(
            outcome["success"] for outcome in results["sources"].values()
        )
        results["completed_at"] = datetime.now(timezone.utc).isoformat()

        if self.output_manager.current_dir:
            results["results_path"] = self.output_manager.write_json(RESULTS_FILENAME, results)
            print(f"\n  Results saved to: {results['results_path']}")

        return results

    def search_query_for(self, source: PaginatedSource) -> Optional[str]:
        """The configured search string for a source that accepts one, else None."""
        if source.search_query_setting is None:
            return None
        return self.search_queries.get(source.search_query_setting) or None

    def run_source(self, source: PaginatedSource) -> Dict[str, Any]:
        """Fetch, present and export one source.

        Returns:
            A dict containing success, fetched/kept/exported counts, the
            export paths that were written, export_errors, and error (if
            the fetch failed).
        """
        outcome: Dict[str, Any] = {"success": False, "export_errors": []}
        date_range = self.date_range

        print_banner(source.title)
        search_query = self.search_query_for(source)
        if search_query:
            print(f"\nSearching for {source.item_noun} with {source.search_query_setting}: {search_query}")
            print("  (start and end dates do not apply while a search query is set)\n")
        else:
            print(f"\nSearching for {source.item_noun} from {self.start_date} to {self.end_date}\n")

        variables = source.build_variables(date_range, search_query)
        try:
            extraction = extract(self.build_client(source), source, variables)
        except ExtractionError as e:
            outcome["error"] = str(e)
            print(f"\n  ERROR fetching {source.item_noun}: {e}")
            return outcome

        outcome.update({
            "success": True,
            "fetched": extraction.fetched_count,
            "kept": len(extraction.items),
        })
        if extraction.dropped_count:
            print(f"  Dropped {extraction.dropped_count} {source.item_noun} "
                  f"that are no longer in a finished state")

        print_table(source, extraction.items)
        print_summary(source, extraction.items, date_range, search_query)

        if extraction.records:
            print("\nExporting to files...")
            self._export(extraction, outcome)
        else:
            print(f"\nNo {source.item_noun} found in the specified date range.")

        return outcome

    def _export(self, extraction: Extraction, outcome: Dict[str, Any]) -> None:
        source = extraction.source
        count = len(extraction.records)

        try:
            self.output_manager.create_run_dir()
        except OSError as e:
            outcome["export_errors"].append(f"output directory: {e}")
            print(f"  ERROR creating output directory: {e}")
            return

        if self.save_json:
            try:
                path = export_json(extraction.records, self.output_manager.get_output_path(source.json_filename))
                outcome["json_path"] = path
                print(f"  Exported {count} {source.item_noun} to {path}")
            except OSError as e:
                outcome["export_errors"].append(f"json: {e}")
                print(f"  ERROR exporting JSON: {e}")

        if self.save_csv:
            try:
                path = export_csv(
                    extraction.records,
                    source.csv_header,
                    self.output_manager.get_output_path(source.csv_filename),
                )
                if path:
                    outcome["csv_path"] = path
                    print(f"  Exported {count} {source.item_noun} to {path}")
            except OSError as e:
                outcome["export_errors"].append(f"csv: {e}")
                print(f"  ERROR exporting CSV: {e}")

    def print_summary(self, results: Dict[str, Any]) -> None:
        """Print a human-readable execution summary.

        Args:
            results: The dict returned by run().
        """
        print_banner("EXTRACTION COMPLETE")
        print(f"Status: {'SUCCESS' if results.get('success') else 'FAILED'}")

        for name, outcome in results.get("sources", {}).items():
            if outcome.get("success"):
                print(f"{name}: {outcome.get('kept', 0)} kept of {outcome.get('fetched', 0)} fetched")
            else:
                print(f"{name}: FAILED - {outcome.get('error', 'unknown error')}")
            for path_key in ("json_path", "csv_path"):
                if outcome.get(path_key):
                    print(f"  {outcome[path_key]}")
            for err in outcome.get("export_errors", []):
                print(f"  Export error: {err}")
