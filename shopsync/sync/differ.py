"""Mirror-mode diffing between the kept side and the pruned side."""

from collections.abc import Iterable
from typing import Callable, TypeVar

T = TypeVar("T")


def find_prune_candidates(
    authoritative_handles: Iterable[str],
    candidates: Iterable[T],
    handle_of: Callable[[T], str],
) -> list[T]:
    """Return the candidates whose handle is absent from the kept side.

    Pull-mirror passes remote handles and local files; push-mirror passes
    local handles and remote resources. The result keeps the candidates'
    enumeration order, so identical inputs always give an identical plan.

    Args:
        authoritative_handles: Handles that exist on the side being kept
        candidates: Items on the side being pruned
        handle_of: Maps a candidate to its handle

    Returns:
        Candidates to delete

    Examples:
        >>> find_prune_candidates(["a"], ["a", "c"], lambda h: h)
        ['c']
    """
    keep = set(authoritative_handles)
    return [item for item in candidates if handle_of(item) not in keep]
