"""
Post-Fetch Filter — Client-side correction of the server-side query filter.

The remote filters are not trusted on their own: Linear matches on completedAt
alone, so a reopened issue still comes back. Each source supplies the
predicate that states what "done" really means for it.
"""

from typing import Callable, Iterable, List, TypeVar

T = TypeVar("T")


def filter_items(items: Iterable[T], predicate: Callable[[T], bool]) -> List[T]:
    """Return the items for which predicate is true, in their original order."""
    return [item for item in items if predicate(item)]
