"""
Output Manager — Per-run export folders and retention cleanup.

Each extraction run writes into one folder under the base output directory,
named YYYYMMDD_HHMM_{run_label} (e.g., "20260301_0915_completed_work").
Inside it the orchestrator saves:

  - linear_completed_tickets.json / .csv   (Linear source)
  - pull_requests_merged.json / .csv       (GitHub source)
  - extraction_results.json                (run metadata, counts, errors)

Run folders older than retention_days are deleted at startup (run.py calls
cleanup_old_folders() before the run). retention_days=0 keeps everything.
"""

import json
import os
import re
import shutil
from datetime import datetime, timedelta
from typing import Any, List, Optional

_FOLDER_PATTERN = re.compile(r"^(\d{8}_\d{4})_")


class OutputManager:
    """Creates the run folder and resolves file paths inside it.

    Attributes:
        base_dir: Root output directory (default: ./output).
        run_label: Suffix of the run folder name (sanitized).
        retention_days: Delete run folders older than this (0 = keep forever).
        current_dir: The current run folder, None until created.
    """

    def __init__(self, base_dir: str, run_label: str, retention_days: int = 30):
        self.base_dir = base_dir
        self.run_label = run_label
        self.retention_days = retention_days
        self.current_dir: Optional[str] = None
        self._run_timestamp = datetime.now()

    @property
    def folder_name(self) -> str:
        safe_label = "".join(c if c.isalnum() or c in "-_" else "_" for c in self.run_label)
        return f"{self._run_timestamp.strftime('%Y%m%d_%H%M')}_{safe_label}"

    def create_run_dir(self) -> str:
        """Create (if needed) and return the folder for the current run."""
        if self.current_dir is None:
            self.current_dir = os.path.join(self.base_dir, self.folder_name)
        os.makedirs(self.current_dir, exist_ok=True)
        return self.current_dir

    def get_output_path(self, filename: str) -> str:
        """Resolve a filename inside the current run folder.

        Raises:
            RuntimeError: If create_run_dir() has not been called yet.
        """
        if not self.current_dir:
            raise RuntimeError("Output directory not created. Call create_run_dir() first.")
        return os.path.join(self.current_dir, filename)

    def write_json(self, filename: str, payload: Any) -> str:
        path = self.get_output_path(filename)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, default=str)
        return path

    def _folder_time(self, name: str) -> Optional[datetime]:
        match = _FOLDER_PATTERN.match(name)
        if not match:
            return None
        try:
            return datetime.strptime(match.group(1), "%Y%m%d_%H%M")
        except ValueError:
            return None

    def expired_folders(self) -> List[str]:
        """Paths of run folders older than retention_days, oldest first.

        Only directories named YYYYMMDD_HHMM_* count as run folders; anything
        else in base_dir is never returned.
        """
        if self.retention_days <= 0 or not os.path.isdir(self.base_dir):
            return []

        cutoff = datetime.now() - timedelta(days=self.retention_days)
        aged = []
        with os.scandir(self.base_dir) as entries:
            for entry in entries:
                stamp = self._folder_time(entry.name)
                if stamp is not None and stamp < cutoff and entry.is_dir():
                    aged.append((stamp, entry.path))
        return [path for _, path in sorted(aged)]

    def cleanup_old_folders(self, debug: bool = False) -> int:
        """Delete expired run folders. Returns how many were removed."""
        removed = 0
        for path in self.expired_folders():
            try:
                shutil.rmtree(path)
            except OSError as e:
                print(f"  Warning: could not remove {os.path.basename(path)}: {e}")
                continue
            removed += 1
            if debug:
                print(f"  Removed expired run folder: {os.path.basename(path)}")
        return removed
