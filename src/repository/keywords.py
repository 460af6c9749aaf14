"""Ordering and merging of ebuild KEYWORDS.

Keywords are sorted the way repoman lays them out: by OS suffix first
(``amd64`` before ``amd64-linux``), then by architecture.
"""
from __future__ import annotations

import functools
import re
from typing import Dict, Iterable, Iterator, Tuple

PATTERN_MARKER = re.compile(r"^[-~]")
NO_SUFFIX = "0"

# Stronger forms evict weaker ones for the same architecture.
_STRENGTH = {"~": 0, "": 1, "-": 2}


def _split(keyword: str) -> Tuple[str, str]:
    arch, _, suffix = PATTERN_MARKER.sub("", keyword).partition("-")
    return arch, suffix or NO_SUFFIX


def keyword_sort_key(keyword: str) -> Tuple[str, str]:
    """Key ordering keywords by OS suffix, then architecture."""
    arch, suffix = _split(keyword)
    return suffix, arch


def compare_keywords(first: str, second: str) -> int:
    """Three-way keyword comparison ignoring ``-``/``~`` markers."""
    first_key = keyword_sort_key(first)
    second_key = keyword_sort_key(second)
    if first_key < second_key:
        return -1
    if first_key > second_key:
        return 1
    return 0


KeywordComparator = functools.cmp_to_key(compare_keywords)


def _marker(keyword: str) -> str:
    return keyword[0] if keyword[:1] in ("-", "~") else ""


def _arch(keyword: str) -> str:
    return keyword[1:] if _marker(keyword) else keyword


class KeywordSet:
    """Set of keywords holding at most one of ``X``, ``~X`` and ``-X``.

    ``-X`` replaces ``X`` and ``~X``; ``X`` replaces ``~X``; ``~X`` is only
    added when neither of the other forms is present.
    """

    def __init__(self, keywords: Iterable[str] = ()):
        self._by_arch: Dict[str, str] = {}
        self.update(keywords)

    def add(self, keyword: str) -> None:
        """Add one keyword, honouring the strength rules."""
        keyword = keyword.strip()
        if not keyword:
            return
        arch = _arch(keyword)
        current = self._by_arch.get(arch)
        if current is None or _STRENGTH[_marker(keyword)] >= _STRENGTH[_marker(current)]:
            self._by_arch[arch] = keyword

    def update(self, keywords: Iterable[str]) -> None:
        """Add several keywords; strings are split on whitespace."""
        if isinstance(keywords, str):
            keywords = keywords.split()
        for keyword in keywords:
            self.add(keyword)

    def __contains__(self, keyword: str) -> bool:
        return self._by_arch.get(_arch(keyword)) == keyword

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._by_arch.values(), key=KeywordComparator))

    def __len__(self) -> int:
        return len(self._by_arch)

    def __str__(self) -> str:
        return " ".join(self)
