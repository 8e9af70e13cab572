"""
Sources package — One PaginatedSource per external API.

  linear.py   Completed Linear issues (viewer.assignedIssues)
  github.py   Merged GitHub pull requests (search connection)
  base.py     The PaginatedSource capability set and field readers
"""

from .base import PAGE_SIZE, DateRange, PaginatedSource, TableColumn
from .github import GITHUB_SOURCE
from .linear import LINEAR_SOURCE

SOURCES = {
    LINEAR_SOURCE.name: LINEAR_SOURCE,
    GITHUB_SOURCE.name: GITHUB_SOURCE,
}
