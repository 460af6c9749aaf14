"""Portage tree walker producing cache records.

Walks ``<tree>/<category>/<package>/*.ebuild`` and hands each ebuild to
``ebuild_parser.parse_ebuild``. Any I/O failure aborts the whole scan: the
cache is either regenerated from a complete walk or not at all.
"""
from __future__ import annotations

import logging
import os
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List

from constants import Constants
from common.logging_utils import Timer, extra_context, is_debug_enabled
from versioning.errors import InvalidVersionFormat
from versioning.models import CacheRecord

from .ebuild_parser import EbuildParseError, parse_ebuild

logger = logging.getLogger(__name__)


class RepositoryScanError(OSError):
    """Raised when a directory or ebuild of the tree cannot be read."""


@dataclass
class ScanSession:
    """Records and counters collected by one scan.

    Counters are for operator reporting only.
    """

    records: List[CacheRecord] = field(default_factory=list)
    categories: int = 0
    packages: int = 0
    ebuilds: int = 0
    java_ebuilds: int = 0
    eclass_counts: Counter = field(default_factory=Counter)
    elapsed_ms: int = 0

    def summary(self) -> str:
        """One-line report of the scan."""
        used = ", ".join(
            f"{eclass} = {self.eclass_counts[eclass]}"
            for eclass in sorted(self.eclass_counts)
        )
        return (
            f"Parsed {self.categories} categories {self.packages} packages "
            f"{self.ebuilds} ebuilds in {self.elapsed_ms}ms and found "
            f"{self.java_ebuilds} java ebuilds (used java eclasses: {used})"
        )


def _subdirectories(path: str) -> List[str]:
    try:
        with os.scandir(path) as entries:
            return sorted(
                entry.name for entry in entries
                if entry.is_dir() and not entry.name.startswith(".")
            )
    except OSError as exc:
        raise RepositoryScanError(f"Failed to list directory {path}: {exc}") from exc


def _ebuild_files(path: str) -> List[str]:
    try:
        with os.scandir(path) as entries:
            return sorted(
                entry.name for entry in entries
                if entry.is_file() and entry.name.endswith(Constants.EBUILD_SUFFIX)
            )
    except OSError as exc:
        raise RepositoryScanError(f"Failed to list directory {path}: {exc}") from exc


def scan_package(session: ScanSession, tree: str, category: str, package: str) -> None:
    """Parse every ebuild of one package directory into ``session``."""
    package_dir = os.path.join(tree, category, package)
    prefix = package + "-"
    for name in _ebuild_files(package_dir):
        session.ebuilds += 1
        if not name.startswith(prefix):
            logger.warning("Skipping %s/%s: not named after its package", package_dir, name)
            continue
        path = os.path.join(package_dir, name)
        try:
            records = parse_ebuild(path, category, package, tree)
        except OSError as exc:
            raise RepositoryScanError(f"Failed to read ebuild {path}: {exc}") from exc
        except InvalidVersionFormat as exc:
            raise EbuildParseError(path, str(exc)) from exc
        if not records:
            continue
        session.records.extend(records)
        session.java_ebuilds += 1
        session.eclass_counts.update(records[0].eclasses)


def scan_tree(session: ScanSession, tree: str) -> None:
    """Scan one Portage tree into ``session``."""
    logger.info("Parsing portage tree @ %s ...", tree)
    for category in _subdirectories(tree):
        if category in Constants.NON_CATEGORY_DIRS:
            continue
        session.categories += 1
        for package in _subdirectories(os.path.join(tree, category)):
            session.packages += 1
            scan_package(session, tree, category, package)
        if is_debug_enabled(logger):
            logger.debug(
                "Category scanned",
                extra=extra_context(
                    event="scan_category",
                    component="scanner",
                    target=category,
                    count=len(session.records),
                ),
            )


def scan_trees(trees: Iterable[str]) -> ScanSession:
    """Scan the given Portage trees and return the collected session.

    Raises:
        RepositoryScanError: If a directory or ebuild cannot be read.
        EbuildParseError: For a malformed MAVEN_PROVIDES entry or an
            unparseable Maven version; the message names the ebuild.
    """
    session = ScanSession()
    with Timer() as timer:
        for tree in trees:
            scan_tree(session, tree)
    session.elapsed_ms = timer.duration_ms()
    logger.info(session.summary())
    return session
