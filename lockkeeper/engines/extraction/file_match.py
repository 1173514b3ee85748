"""Match candidate repository files to an ecosystem's manifest patterns."""

from __future__ import annotations

import fnmatch
import posixpath
from collections.abc import Iterable, Sequence

import structlog

log = structlog.get_logger(__name__)


def _matches(path: str, pattern: str) -> bool:
    if "/" not in pattern:
        return fnmatch.fnmatchcase(posixpath.basename(path), pattern)
    if fnmatch.fnmatchcase(path, pattern):
        return True
    # "**/x" also matches "x" at the repository root.
    if pattern.startswith("**/"):
        return fnmatch.fnmatchcase(path, pattern[3:])
    return False


def get_matching_files(
    ecosystem: str, file_list: Iterable[str], patterns: Sequence[str]
) -> list[str]:
    """Return the paths in *file_list* matching any of *patterns*.

    Patterns use glob syntax; one without a ``/`` is compared against the
    basename so ``mix.exs`` matches at any depth. Input order is kept and
    duplicates are dropped.
    """
    seen: set[str] = set()
    matched: list[str] = []
    for path in file_list:
        if path in seen:
            continue
        if any(_matches(path, pattern) for pattern in patterns):
            seen.add(path)
            matched.append(path)
    log.debug("file_match.done", ecosystem=ecosystem, matched=len(matched))
    return matched
