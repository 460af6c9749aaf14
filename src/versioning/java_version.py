"""Java platform version (``1.8``, ``11``, ``17``...)."""
from __future__ import annotations

import re
from dataclasses import dataclass, field

from .errors import InvalidVersionFormat

PATTERN_JAVA_VERSION = re.compile(r"^(?:1\.)?(\d+)$")
# Oldest runtime shipped by the repository; older requests are raised to it.
LEGACY_MAX = 8
LEGACY_STRING = "1.8"


@dataclass(frozen=True, order=True)
class JavaVersion:
    """Java version number with its rendered string.

    ``1.6``, ``7`` and ``8`` all render as ``1.8``; newer releases keep the
    form they were given in.
    """

    number: int
    version_string: str = field(default="", compare=False)

    @classmethod
    def parse(cls, raw: str) -> "JavaVersion":
        """Parse ``raw``, raising InvalidVersionFormat when it is not a Java version."""
        text = (raw or "").strip()
        match = PATTERN_JAVA_VERSION.match(text)
        if not match:
            raise InvalidVersionFormat("Java", text)
        number = int(match.group(1))
        rendered = LEGACY_STRING if number <= LEGACY_MAX else text
        return cls(number=number, version_string=rendered)

    def compare(self, other: "JavaVersion") -> int:
        """Three-way comparison returning -1, 0 or 1."""
        if self.number < other.number:
            return -1
        if self.number > other.number:
            return 1
        return 0

    def __str__(self) -> str:
        return self.version_string
