"""
Ignore-pattern compilation for ``IgnoreFiles.sdvextension``.

The pattern vocabulary is deliberately flat: literal path segments, ``*`` as
a wildcard that also crosses ``/``, and an optional trailing ``/`` marking a
directory-scoped pattern. Matching is anchored and case-insensitive.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Tuple

import pathspec
from pathspec.pattern import RegexPattern

# Everything the regex engine treats specially except ``*``.
_SPECIALS = re.compile(r"[.+?^${}()|\[\]\\]")


class IgnorePattern(RegexPattern):
    """A compiled ignore pattern usable on its own or inside a PathSpec."""

    __slots__ = ("directory_scoped",)

    def __init__(self, pattern: str):
        self.directory_scoped = pattern.endswith("/")
        super().__init__(pattern)

    @classmethod
    def pattern_to_regex(cls, pattern: str) -> Tuple[Optional[str], Optional[bool]]:
        directory_scoped = pattern.endswith("/")
        clean = (pattern[:-1] if directory_scoped else pattern).strip()
        if not clean:
            # null-operation pattern, never matches anything
            return None, None

        escaped = _SPECIALS.sub(lambda m: "\\" + m.group(0), clean)
        wildcarded = escaped.replace("*", ".*")
        suffix = "(/.*)?$" if directory_scoped else "$"
        return "(?i)^" + wildcarded + suffix, True

    def __call__(self, path: str) -> bool:
        if self.include is None:
            return False
        return self.regex.match(path) is not None


def compile_pattern(pattern: str) -> IgnorePattern:
    """Compile *pattern* into a predicate over relative entry paths."""
    return IgnorePattern(pattern)


def compile_patterns(patterns: Iterable[str]) -> "pathspec.PathSpec":
    """Compile an ordered pattern list into a :class:`pathspec.PathSpec`."""
    return pathspec.PathSpec(compile_pattern(p) for p in patterns)


def is_ignored(spec: "pathspec.PathSpec", path: str) -> bool:
    """True when any pattern of *spec* matches *path*; first hit wins."""
    # stops at the first hit, PathSpec.match_file always walks every pattern
    return any(pattern(path) for pattern in spec.patterns)
