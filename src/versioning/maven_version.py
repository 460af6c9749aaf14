"""Maven version parsing and ordering.

Upstream projects format versions inconsistently (``v1.2``, ``2.0b3``,
``1.0.0.RELEASE``, ``[1.0,2.0)``). ``MavenVersion`` reduces all of them to a
``(major, minor, incremental, qualifier)`` tuple so versions coming from the
cache file, from ebuilds and from pom files compare the same way.

This is not semantic versioning: qualifiers compare as plain strings, so
``1.0-alpha`` sorts after ``1.0-9``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field

from .errors import InvalidVersionFormat

PATTERN_VERSION = re.compile(
    r"^[vr]?(\d+)(?:\.(\d+))?(?:(?:\.|b|beta)(\d+))?(?:[.-]?(.*))?$"
)
# Only the lower bound of a range takes part in matching.
PATTERN_VERSION_RANGE = re.compile(r"^[\[(](.*), ?(.*?)[\])]$")


@dataclass(frozen=True, order=True)
class MavenVersion:
    """Parsed Maven version.

    Attributes:
        major: Major version number.
        minor: Minor version number, 0 when absent.
        incremental: Incremental version number, 0 when absent.
        qualifier: Lowercased remainder after the numeric part, "" when absent.
        raw: The original string; excluded from equality and ordering.
    """

    major: int
    minor: int = 0
    incremental: int = 0
    qualifier: str = ""
    raw: str = field(default="", compare=False)

    @classmethod
    def parse(cls, raw: str) -> "MavenVersion":
        """Parse ``raw`` into a MavenVersion.

        Args:
            raw: Version string or version range.

        Raises:
            InvalidVersionFormat: If the (lower bound of the) version does not
                match the accepted grammar.
        """
        if raw is None:
            raise InvalidVersionFormat("Maven", "None")
        text = raw.strip()
        range_match = PATTERN_VERSION_RANGE.match(text)
        if range_match:
            text = range_match.group(1).strip()

        match = PATTERN_VERSION.match(text)
        if not match:
            raise InvalidVersionFormat("Maven", text)

        major, minor, incremental, qualifier = match.groups()
        try:
            numbers = [int(n) if n is not None else 0 for n in (major, minor, incremental)]
        except ValueError as exc:
            # int() refuses digit runs beyond sys.get_int_max_str_digits().
            raise InvalidVersionFormat("Maven", text) from exc
        return cls(
            major=numbers[0],
            minor=numbers[1],
            incremental=numbers[2],
            qualifier=qualifier.lower() if qualifier else "",
            raw=raw,
        )

    @property
    def canonical(self) -> str:
        """Normalized textual form; parses back to an equal version."""
        base = f"{self.major}.{self.minor}.{self.incremental}"
        return f"{base}-{self.qualifier}" if self.qualifier else base

    def compare(self, other: "MavenVersion") -> int:
        """Three-way comparison returning -1, 0 or 1."""
        if self < other:
            return -1
        if self > other:
            return 1
        return 0

    def __str__(self) -> str:
        return self.raw or self.canonical
