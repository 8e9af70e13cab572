"""
Presenters — Console table, summary, JSON and CSV output.

The console functions read the filtered raw records (they need fields such as
additions/deletions that the export shape flattens away). The export
functions take flat export records and write one file each.

Placeholder conventions:
    Console table and CSV render an absent optional value as "N/A".
    JSON omits the key instead (see each record's to_json_dict()).

Each export function raises on I/O failure; the orchestrator isolates them so
that a failed JSON write does not stop the CSV write.
"""

import csv
import json
from collections import Counter
from typing import Any, Optional, Sequence

from .sources.base import DateRange, PaginatedSource

RULE_WIDTH = 60


def print_banner(title: str) -> None:
    print(f"\n{'='*RULE_WIDTH}")
    print(title)
    print("=" * RULE_WIDTH)


def print_table(source: PaginatedSource, items: Sequence[Any]) -> None:
    """Print items as a fixed-width table using the source's column layout."""
    if not items:
        print(f"\nNo {source.item_noun} found.")
        return

    columns = source.table_columns
    rule = "=" * source.table_rule_width

    print("\n" + rule)
    print(" ".join(f"{c.header:<{c.width}}" for c in columns))
    print(rule)
    for item in items:
        print(" ".join(f"{c.value(item):<{c.width}}" for c in columns))
    print(rule)


def print_summary(
    source: PaginatedSource,
    items: Sequence[Any],
    date_range: DateRange,
    search_query: Optional[str] = None,
) -> None:
    print_banner("SUMMARY")
    print(f"Total {source.summary_label or source.item_noun}: {len(items)}")
    if search_query:
        print(f"Search query: {search_query}")
    else:
        print(f"Date range: {date_range.display()}")

    if items:
        for heading, key in source.summary_groups:
            counts = Counter(key(item) for item in items)
            print(f"\n{heading}:")
            for name, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])):
                print(f"  {name}: {count}")

        if source.summary_totals is not None:
            print()
            for line in source.summary_totals(items):
                print(line)

    print("=" * RULE_WIDTH)


def export_json(records: Sequence[Any], path: str) -> str:
    """Write records as a pretty-printed JSON array.

    Returns:
        The path written.

    Raises:
        OSError: If the file cannot be written.
    """
    payload = [record.to_json_dict() for record in records]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    return path


def export_csv(records: Sequence[Any], header: Sequence[str], path: str) -> str:
    """Write records as CSV with a fixed header row.

    Returns:
        The path written, or "" when there was nothing to export.

    Raises:
        OSError: If the file cannot be written.
    """
    if not records:
        print("  No records to export")
        return ""

    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for record in records:
            writer.writerow(record.to_csv_row())
    return path
