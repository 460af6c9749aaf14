"""Portage tree scanning and ebuild helpers."""

from .ebuild_parser import EbuildParseError, parse_ebuild
from .keywords import KeywordSet, compare_keywords, keyword_sort_key
from .scanner import RepositoryScanError, ScanSession, scan_trees

__all__ = [
    "EbuildParseError",
    "KeywordSet",
    "RepositoryScanError",
    "ScanSession",
    "compare_keywords",
    "keyword_sort_key",
    "parse_ebuild",
    "scan_trees",
]
