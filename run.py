#!/usr/bin/env python3
"""
Completed Work Extractor — Entry Point.

Pulls the work you finished in a date window out of Linear (completed issues
assigned to you) and GitHub (pull requests you authored that were merged),
prints a table and summary per source, and saves JSON and CSV exports.

For each selected source the orchestrator:
  1. Pages through the GraphQL API, 100 items per request
  2. Drops items that are no longer in a finished state
  3. Prints a console table and a summary
  4. Saves JSON and CSV exports to a timestamped output folder

Usage:
    python run.py                          # All sources from SOURCES (.env)
    python run.py --source linear          # Only Linear
    python run.py --source github --no-csv # Only GitHub, JSON only
    python run.py --start-date 2025-06-01T00:00:00Z --end-date 2025-06-30T23:59:59Z
    python run.py --debug                  # Verbose output
    python run.py --version                # Show version
    python run.py --env /path              # Use alternate .env file

When GITHUB_SEARCH_QUERY is set, it replaces the date window for GitHub:
--start-date and --end-date then only apply to Linear.
"""

import argparse
import logging
import sys
from pathlib import Path

from work_extractor import ExtractionOrchestrator, SOURCES

# Read version from the repo-root VERSION file (e.g., "0.1.0").
VERSION_FILE = Path(__file__).resolve().parent / "VERSION"
VERSION = VERSION_FILE.read_text().strip() if VERSION_FILE.exists() else "unknown"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Completed Work Extractor - Export finished Linear issues and merged GitHub PRs"
    )
    parser.add_argument("--env", "-e", default="./.env", help="Path to .env file")
    parser.add_argument(
        "--source",
        choices=sorted(SOURCES) + ["all"],
        help="Source to extract (default: SOURCES from .env)",
    )
    parser.add_argument("--start-date", help="Window start, RFC 3339 (overrides START_DATE)")
    parser.add_argument("--end-date", help="Window end, RFC 3339 (overrides END_DATE)")
    parser.add_argument("--output-dir", "-o", help="Output directory (overrides OUTPUT_DIR)")
    parser.add_argument("--no-json", action="store_true", help="Skip the JSON export")
    parser.add_argument("--no-csv", action="store_true", help="Skip the CSV export")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--version", "-v", action="store_true", help="Show version and exit")
    return parser


def main(argv=None):
    """Parse CLI arguments and run the extraction."""
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"completed-work-extractor {VERSION}")
        sys.exit(0)

    # requests/urllib3 log each connection at DEBUG level
    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(name)s - %(levelname)s - %(message)s'
        )

    orchestrator = ExtractionOrchestrator(env_file=args.env)

    # Apply CLI overrides on top of .env values
    if args.source == "all":
        orchestrator.source_names = list(SOURCES)
    elif args.source:
        orchestrator.source_names = [args.source]
    if args.start_date:
        orchestrator.start_date = args.start_date
    if args.end_date:
        orchestrator.end_date = args.end_date
    if args.output_dir:
        orchestrator.output_manager.base_dir = args.output_dir
    if args.no_json:
        orchestrator.save_json = False
    if args.no_csv:
        orchestrator.save_csv = False
    if args.debug:
        orchestrator.debug = True

    print(f"\n{'='*60}")
    print(f"COMPLETED WORK EXTRACTOR v{VERSION}")
    print("="*60)
    print(f"Sources: {', '.join(orchestrator.source_names) or '(none)'}")
    print(f"Date range: {orchestrator.date_range.display()}")

    if not orchestrator.validate_config():
        sys.exit(1)

    if orchestrator.output_manager.retention_days > 0:
        deleted = orchestrator.output_manager.cleanup_old_folders(orchestrator.debug)
        if deleted > 0:
            print(f"Cleaned up {deleted} old output folder(s)")

    results = orchestrator.run()
    orchestrator.print_summary(results)

    if not results.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
