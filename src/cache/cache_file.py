"""Reading and writing the flat cache file.

Layout::

    1.1
    #category:pkg:version:slot:useFlag:groupId:artifactId:mavenVersion:javaEclass
    dev-java:junit:4.13.2:4::junit:junit:4.13.2:java-pkg-2,java-pkg-simple

The first line is the schema token. Lines starting with ``#`` and blank lines
are skipped. Trailing fields may be missing (older schema versions wrote fewer
fields); they are read as absent.
"""
from __future__ import annotations

import logging
import os
import tempfile
from typing import Iterable, Iterator, List, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from versioning.errors import InvalidVersionFormat
from versioning.models import CacheRecord

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = ":"
ECLASS_SEPARATOR = ","
REQUIRED_FIELDS = 4


class CacheFormatError(ValueError):
    """Raised for a malformed cache line."""

    def __init__(self, message: str, path: Optional[str] = None, line_number: Optional[int] = None):
        self.path = path
        self.line_number = line_number
        location = ""
        if path is not None:
            location = f"{path}:{line_number}: " if line_number is not None else f"{path}: "
        super().__init__(f"{location}{message}")


class UnsupportedCacheVersion(CacheFormatError):
    """Raised when the schema token is unknown or newer than supported."""

    def __init__(self, version: str, path: Optional[str] = None):
        self.version = version
        super().__init__(
            f"Unsupported version of cache ({version!r}). "
            "Please refresh the cache using the 'refresh' command.",
            path=path,
        )


def _optional(parts: List[str], index: int) -> Optional[str]:
    if index < len(parts) and parts[index]:
        return parts[index]
    return None


def parse_line(line: str) -> CacheRecord:
    """Parse one data line into a CacheRecord.

    Raises:
        CacheFormatError: If the line has fewer than four fields or a group id
            without artifact id and version.
        InvalidVersionFormat: If the Maven version cannot be parsed.
    """
    parts = line.rstrip("\r\n").split(FIELD_SEPARATOR)
    if len(parts) < REQUIRED_FIELDS:
        raise CacheFormatError(f"Failed to parse cache line: {line.strip()!r}")

    group_id = _optional(parts, 5)
    artifact_id = _optional(parts, 6)
    maven_version = _optional(parts, 7)
    if group_id is not None and (artifact_id is None or maven_version is None):
        raise CacheFormatError(
            f"Cache line has a groupId without artifactId and version: {line.strip()!r}"
        )

    eclasses_field = _optional(parts, 8)
    eclasses = eclasses_field.split(ECLASS_SEPARATOR) if eclasses_field else []

    return CacheRecord(
        category=parts[0],
        package=parts[1],
        version=parts[2],
        slot=parts[3],
        use_flag=_optional(parts, 4),
        group_id=group_id,
        artifact_id=artifact_id,
        maven_version=maven_version,
        eclasses=eclasses,
    )


def format_line(record: CacheRecord) -> str:
    """Serialize a CacheRecord into one data line (without newline)."""
    return FIELD_SEPARATOR.join([
        record.category,
        record.package,
        record.version,
        record.slot,
        record.use_flag or "",
        record.group_id or "",
        record.artifact_id or "",
        record.maven_version or "",
        ECLASS_SEPARATOR.join(record.eclasses),
    ])


def check_version(token: str, path: Optional[str] = None) -> bool:
    """Validate the schema token.

    Returns:
        True when the token is a legacy-but-supported version.

    Raises:
        UnsupportedCacheVersion: If the token is neither current nor legacy.
    """
    if token == Constants.CACHE_VERSION:
        return False
    if token in Constants.CACHE_LEGACY_VERSIONS:
        logger.warning(
            "Cache format %s is not up-to-date, consider refreshing the cache.",
            token,
        )
        return True
    raise UnsupportedCacheVersion(token, path)


def read_cache_file(path: str) -> Iterator[CacheRecord]:
    """Yield the records of the cache file at ``path``.

    Raises:
        OSError: If the file cannot be read.
        UnsupportedCacheVersion: If the schema token is not supported.
        CacheFormatError: For a malformed data line (with line number).
    """
    with open(path, "r", encoding="utf-8") as handle:
        check_version(handle.readline().strip(), path)
        for line_number, line in enumerate(handle, start=2):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            try:
                yield parse_line(stripped)
            except CacheFormatError as exc:
                raise CacheFormatError(str(exc), path, line_number) from exc
            except InvalidVersionFormat as exc:
                raise CacheFormatError(str(exc), path, line_number) from exc


def _current_umask() -> int:
    # mkstemp creates 0600 files; the cache gets the mode a plain open() would.
    mask = os.umask(0)
    os.umask(mask)
    return mask


def record_sort_key(record: CacheRecord):
    """Order used for the file: category, package, then version."""
    return (record.category, record.package, record.version)


def write_cache_file(records: Iterable[CacheRecord], path: str) -> int:
    """Write ``records`` to ``path``, replacing any existing file.

    The file is written to a temporary sibling first and moved into place, so
    a failure leaves the previous cache untouched.

    Returns:
        Number of records written.
    """
    ordered = sorted(records, key=record_sort_key)
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(prefix=".cache-", dir=directory, text=True)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(Constants.CACHE_VERSION + "\n")
            handle.write(Constants.CACHE_HEADER + "\n")
            for record in ordered:
                handle.write(format_line(record) + "\n")
        os.chmod(tmp_path, 0o666 & ~_current_umask())
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    if is_debug_enabled(logger):
        logger.debug(
            "Cache file written",
            extra=extra_context(
                event="cache_write",
                component="cache_file",
                target=path,
                count=len(ordered),
            ),
        )
    return len(ordered)
