"""Test file discovery under a root directory."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

from testrunner.config import ConfigurationError

logger = logging.getLogger(__name__)

Walker = Callable[..., Iterable[str]]


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile the file-match pattern or fail the run."""

    try:
        return re.compile(pattern)
    except re.error as error:
        raise ConfigurationError(f"Invalid pattern {pattern!r}: {error}") from error


def ensure_root_accessible(root: Path) -> None:
    if not root.exists():
        raise ConfigurationError(f"Root directory does not exist: {root}")
    if not root.is_dir():
        raise ConfigurationError(f"Root is not a directory: {root}")
    try:
        with os.scandir(root):
            pass
    except OSError as error:
        raise ConfigurationError(f"Root directory is not readable: {root} ({error})") from error


def walk_tree(root: Path | str, *, follow_symlinks: bool = False) -> Iterator[str]:
    """Yield every file path below root in sorted, depth-first order.

    Unreadable entries are logged and skipped. When following symlinks, a
    directory reached a second time (same device and inode) is not entered
    again, so link cycles terminate.
    """

    visited: set[tuple[int, int]] = set()
    if follow_symlinks:
        _mark_visited(str(root), visited)

    for dirpath, dirnames, filenames in os.walk(
        root,
        onerror=_log_walk_error,
        followlinks=follow_symlinks,
    ):
        dirnames.sort()
        if follow_symlinks:
            dirnames[:] = [
                name for name in dirnames if _mark_visited(os.path.join(dirpath, name), visited)
            ]
        for name in sorted(filenames):
            yield os.path.normpath(os.path.join(dirpath, name))


def _mark_visited(path: str, visited: set[tuple[int, int]]) -> bool:
    try:
        stat = os.stat(path)
    except OSError as error:
        logger.warning("Skipping %s: %s", path, error)
        return False
    key = (stat.st_dev, stat.st_ino)
    if key in visited:
        logger.debug("Skipping already visited directory %s", path)
        return False
    visited.add(key)
    return True


def _log_walk_error(error: OSError) -> None:
    logger.warning("Skipping %s: %s", error.filename, error.strerror or error)


class PathSource:
    """Matching, deduplicated file paths from a tree walk."""

    def __init__(
        self,
        root: Path | str,
        matcher: re.Pattern[str],
        *,
        walker: Walker = walk_tree,
        follow_symlinks: bool = False,
    ) -> None:
        self.root = root
        self.matcher = matcher
        self._walker = walker
        self._follow_symlinks = follow_symlinks
        self._seen: set[str] = set()
        self.duplicate_count = 0

    @property
    def seen_count(self) -> int:
        return len(self._seen)

    def paths(self) -> Iterator[str]:
        for path in self._walker(self.root, follow_symlinks=self._follow_symlinks):
            if not self.matcher.search(path):
                continue
            if path in self._seen:
                self.duplicate_count += 1
                logger.debug("Skipping duplicate path %s", path)
                continue
            self._seen.add(path)
            yield path
