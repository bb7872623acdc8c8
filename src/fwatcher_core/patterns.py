"""Include/exclude path filtering on gitignore-style glob patterns."""

import logging
from collections.abc import Iterable
from pathlib import PurePath

from pathspec import GitIgnoreSpec

logger = logging.getLogger(__name__)


class PatternError(ValueError):
    """A glob pattern could not be compiled."""


def _compile_one(pattern: str) -> GitIgnoreSpec:
    # Leading '!' and '#' are ordinary characters here, not negation or comments
    line = "\\" + pattern if pattern.startswith(("!", "#")) else pattern
    try:
        return GitIgnoreSpec.from_lines([line])
    except ValueError as e:
        raise PatternError(f"Invalid pattern {pattern!r}: {e}") from e


class PatternSet:
    """A compiled set of glob patterns.

    ``**`` matches any number of path segments and ``*`` matches within a
    single segment. Each pattern is matched on its own, so the order of the
    patterns does not matter. An empty set matches nothing.
    """

    def __init__(self, patterns: Iterable[str] = ()):
        self.patterns: tuple[str, ...] = tuple(patterns)
        self._specs = [_compile_one(pattern) for pattern in self.patterns]

    def matches(self, path: str | PurePath) -> bool:
        """Return True if *path* matches at least one pattern."""
        path = PurePath(path).as_posix()
        return any(spec.match_file(path) for spec in self._specs)

    def __len__(self) -> int:
        return len(self.patterns)

    def __repr__(self) -> str:
        return f"PatternSet({list(self.patterns)!r})"


def compile_patterns(patterns: Iterable[str] | PatternSet) -> PatternSet:
    """Compile glob strings into a PatternSet, passing compiled sets through."""
    if isinstance(patterns, PatternSet):
        return patterns
    return PatternSet(patterns)


def qualifies(
    path: str | PurePath,
    include: Iterable[str] | PatternSet,
    exclude: Iterable[str] | PatternSet = (),
) -> bool:
    """Check whether *path* passes the include/exclude rules.

    Args:
        path: Path to check, relative to its watch root where possible
        include: Patterns of which at least one must match
        exclude: Patterns of which none may match

    Returns:
        True if the path matches an include pattern and no exclude pattern
    """
    include = compile_patterns(include)
    if not include.matches(path):
        return False
    exclude = compile_patterns(exclude)
    if exclude.matches(path):
        logger.debug(f"Excluded: {path}")
        return False
    return True
