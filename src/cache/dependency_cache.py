"""In-memory index resolving Maven coordinates to Gentoo dependencies."""
from __future__ import annotations

import bisect
import logging
from typing import Dict, Iterable, Iterator, List, Optional

from constants import Constants
from common.logging_utils import Timer, extra_context, is_debug_enabled
from versioning.maven_version import MavenVersion
from versioning.models import CacheRecord, ResolutionResult, ResolutionStatus

from .cache_file import read_cache_file, record_sort_key, write_cache_file

logger = logging.getLogger(__name__)


def _version_key(record: CacheRecord) -> MavenVersion:
    return record.parsed_version  # type: ignore[return-value]


def _bucket_key(record: CacheRecord):
    # Ties on Maven version fall back to file order so results do not
    # depend on insertion order.
    return (record.parsed_version, record_sort_key(record))


class DependencyCache:
    """Cache mapping groupId -> artifactId -> records sorted by Maven version.

    Built in two phases: ``add()`` appends records without sorting, then
    ``finalize()`` sorts every bucket once. ``load()`` does both.

    Lookups pick the *smallest* packaged version that is at least the
    requested one, which keeps generated ebuilds from pinning newer
    dependencies than needed.
    """

    def __init__(self, virtual_category: str = Constants.VIRTUAL_CATEGORY):
        self._index: Dict[str, Dict[str, List[CacheRecord]]] = {}
        self._records: List[CacheRecord] = []
        self._virtual_category = virtual_category
        self._sorted = True

    def add(self, record: CacheRecord) -> None:
        """Insert a record; buckets are left unsorted until ``finalize()``."""
        self._records.append(record)
        if record.group_id is None:
            return
        artifacts = self._index.setdefault(record.group_id, {})
        artifacts.setdefault(record.artifact_id, []).append(record)
        self._sorted = False

    def add_all(self, records: Iterable[CacheRecord]) -> None:
        """Insert many records; see ``add()``."""
        for record in records:
            self.add(record)

    def finalize(self) -> None:
        """Sort each bucket ascending by parsed Maven version."""
        for artifacts in self._index.values():
            for versions in artifacts.values():
                versions.sort(key=_bucket_key)
        self._sorted = True

    @classmethod
    def load(cls, path: str, virtual_category: str = Constants.VIRTUAL_CATEGORY) -> "DependencyCache":
        """Load the cache file at ``path``.

        Raises:
            OSError: If the file cannot be read.
            UnsupportedCacheVersion: If the schema token is not supported.
            CacheFormatError: For a malformed line.
        """
        cache = cls(virtual_category=virtual_category)
        logger.info("Reading in maven cache from %s", path)
        with Timer() as timer:
            cache.add_all(read_cache_file(path))
            cache.finalize()
        if is_debug_enabled(logger):
            logger.debug(
                "Cache loaded",
                extra=extra_context(
                    event="cache_load",
                    component="dependency_cache",
                    target=path,
                    count=len(cache),
                    groups=len(cache._index),
                    duration_ms=timer.duration_ms(),
                ),
            )
        return cache

    @staticmethod
    def store(records: Iterable[CacheRecord], path: str) -> int:
        """Write ``records`` to ``path`` sorted by category, package and version.

        Returns:
            Number of records written.
        """
        return write_cache_file(records, path)

    def save(self, path: str) -> int:
        """Write this cache's records to ``path``."""
        return self.store(self._records, path)

    def resolve(self, group_id: str, artifact_id: str, version: str) -> ResolutionResult:
        """Resolve a Maven coordinate to a Gentoo dependency.

        Raises:
            InvalidVersionFormat: If ``version`` cannot be parsed.
        """
        if not self._sorted:
            self.finalize()

        artifacts = self._index.get(group_id)
        if artifacts is None:
            return ResolutionResult(
                ResolutionStatus.GROUP_NOT_FOUND, group_id, artifact_id, version
            )

        versions = artifacts.get(artifact_id)
        if versions is None:
            return ResolutionResult(
                ResolutionStatus.ARTIFACT_NOT_FOUND, group_id, artifact_id, version
            )

        requested = MavenVersion.parse(version)
        position = bisect.bisect_left(versions, requested, key=_version_key)
        if position == len(versions):
            return ResolutionResult(
                ResolutionStatus.VERSION_NOT_FOUND, group_id, artifact_id, version
            )

        record = versions[position]
        return ResolutionResult(
            ResolutionStatus.FOUND,
            group_id,
            artifact_id,
            version,
            dependency=self.format_dependency(record),
            record=record,
        )

    def get_dependency(self, group_id: str, artifact_id: str, version: str) -> str:
        """Dependency string or sentinel text for a Maven coordinate."""
        return str(self.resolve(group_id, artifact_id, version))

    def format_dependency(self, record: CacheRecord) -> str:
        """Render ``record`` as an ebuild dependency atom."""
        if record.category == self._virtual_category:
            atom = record.atom
        else:
            atom = f">={record.atom}-{record.bare_version}"
        use = f"[{record.use_flag}]" if record.use_flag else ""
        return f"{atom}{use}:{record.slot}"

    def candidates(self, group_id: str, artifact_id: str) -> List[CacheRecord]:
        """Records indexed under a coordinate, ascending by version."""
        if not self._sorted:
            self.finalize()
        return list(self._index.get(group_id, {}).get(artifact_id, []))

    def groups(self) -> List[str]:
        """Sorted group ids present in the index."""
        return sorted(self._index)

    def records_for_group(self, group_id: Optional[str] = None) -> List[CacheRecord]:
        """All records, or the records of one group, in load order."""
        if group_id is None:
            return list(self._records)
        return [r for r in self._records if r.group_id == group_id]

    @property
    def records(self) -> List[CacheRecord]:
        """All records, including those without a Maven coordinate."""
        return list(self._records)

    def __iter__(self) -> Iterator[CacheRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)
