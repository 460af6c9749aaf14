"""Line-oriented extraction of Java packaging facts from ebuilds.

Ebuilds are bash, but only a handful of declarations matter here:
``inherit``, ``SLOT``, ``JAVA_PKG_OPT_USE``, ``MAVEN_ID`` and
``MAVEN_PROVIDES``. They are picked up by a small line scanner instead of a
shell parser; anything else is only remembered as a ``NAME=value`` variable
for SLOT expansion.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from constants import Constants
from versioning.models import CacheRecord

logger = logging.getLogger(__name__)

PATTERN_VARIABLE = re.compile(r"^(\S+?)=(.*)$")
PATTERN_SURROUNDING_QUOTES = re.compile(r'(^"|"$)')
PATTERN_SUBSLOT = re.compile(r"/.*")
PATTERN_PV = re.compile(r"\$(\{PV\}|PV)")
PATTERN_PN = re.compile(r"\$(\{PN\}|PN)")
PATTERN_SLOT_SUBSTRING = re.compile(r"^\$\{PV:(\d+):(\d+)\}$")
PATTERN_SLOT_COMPONENT_RANGE = re.compile(
    r"^\$\((?:get_version_component_range|ver_cut) (\d+)(?:-(\d+))?\)$"
)

DIRECTIVE_INHERIT = "inherit "
DIRECTIVE_SLOT = "SLOT="
DIRECTIVE_USE = "JAVA_PKG_OPT_USE="
DIRECTIVE_MAVEN_ID = "MAVEN_ID="
DIRECTIVE_MAVEN_PROVIDES = "MAVEN_PROVIDES="


class EbuildParseError(ValueError):
    """Raised when an ebuild declares something that cannot be interpreted."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


@dataclass
class EbuildFacts:
    """Raw declarations collected from one ebuild."""

    eclasses: Optional[List[str]] = None
    slot: str = Constants.DEFAULT_SLOT
    use_flag: Optional[str] = None
    maven_id: Optional[str] = None
    maven_provides: List[str] = field(default_factory=list)
    variables: Dict[str, str] = field(default_factory=dict)


def java_eclasses(inherit_line: str) -> List[str]:
    """Java-related eclasses named on an ``inherit`` line."""
    tokens = inherit_line.split()[1:]
    return [
        token for token in tokens
        if token.startswith(Constants.ECLASS_PREFIX) or token == Constants.ECLASS_ANT_TASKS
    ]


def strip_slot(value: str) -> str:
    """SLOT value without quotes and without the ``/subslot`` part."""
    return PATTERN_SUBSLOT.sub("", value.replace('"', ""))


def _clean(line: str) -> str:
    line = line.strip()
    pos = line.find("#")
    if pos != -1:
        line = line[:pos].strip()
    return line


def scan_lines(lines) -> Optional[EbuildFacts]:
    """Run the directive scanner over ebuild lines.

    Returns:
        The collected facts, or None when an ``inherit`` line names no Java
        eclass and the ebuild is therefore of no interest.
    """
    facts = EbuildFacts()
    in_provides = False

    for raw in lines:
        line = _clean(raw)
        if not line:
            continue

        if in_provides:
            if not line.startswith('"'):
                facts.maven_provides.extend(line.replace('"', "").split())
            if '"' in line:
                in_provides = False
            continue

        match = PATTERN_VARIABLE.match(line)
        if match:
            facts.variables[match.group(1)] = PATTERN_SURROUNDING_QUOTES.sub("", match.group(2))

        if line.startswith(DIRECTIVE_INHERIT):
            # Each inherit line replaces the previous set.
            facts.eclasses = java_eclasses(line)
            if not facts.eclasses:
                return None
        elif line.startswith(DIRECTIVE_SLOT):
            facts.slot = strip_slot(line[len(DIRECTIVE_SLOT):])
        elif line.startswith(DIRECTIVE_USE):
            facts.use_flag = line[len(DIRECTIVE_USE):].replace('"', "")
        elif line.startswith(DIRECTIVE_MAVEN_ID):
            facts.maven_id = line[len(DIRECTIVE_MAVEN_ID):].replace('"', "")
        elif line.startswith(DIRECTIVE_MAVEN_PROVIDES):
            value = line[len(DIRECTIVE_MAVEN_PROVIDES):]
            facts.maven_provides.extend(value.replace('"', "").split())
            # A single quote opens a declaration continued on later lines.
            in_provides = value.count('"') == 1

    return facts


def read_metadata_slot(path: str, default: str) -> str:
    """SLOT from an md5-cache metadata file, or ``default`` when it has none."""
    result = default
    with open(path, "r", encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if line.startswith(DIRECTIVE_SLOT):
                result = strip_slot(line[len(DIRECTIVE_SLOT):])
    return result


def expand_slot(slot: str, pv: str, variables: Dict[str, str]) -> str:
    """Expand variables and the supported bash idioms in a SLOT value.

    Handles ``$PV``/``${PV}``, other collected variables, ``${PV:start:len}``
    and ``$(get_version_component_range A-B)`` / ``$(ver_cut A-B)``.
    """
    result = PATTERN_PV.sub(lambda _m: pv, slot)

    if "$" in result:
        # Longest names first so $MY_PV is not clobbered by $MY.
        for name in sorted(variables, key=len, reverse=True):
            value = variables[name]
            result = result.replace("${" + name + "}", value).replace("$" + name, value)

    if "$" in result:
        match = PATTERN_SLOT_SUBSTRING.match(result)
        if match:
            start = int(match.group(1))
            length = int(match.group(2))
            result = pv[start:start + length]

    if "$" in result:
        match = PATTERN_SLOT_COMPONENT_RANGE.match(result)
        if match:
            start = int(match.group(1))
            end = int(match.group(2) or start)
            parts = pv.split(".")
            result = ".".join(
                parts[i - 1] if i <= len(parts) else "0"
                for i in range(start, end + 1)
            )

    return result


def split_coordinate(maven_id: str, package: str, pv: str, version: str):
    """Split a MAVEN_ID value into (group, artifact, version) with defaults."""
    maven_id = PATTERN_PN.sub(lambda _m: package, maven_id)
    maven_id = PATTERN_PV.sub(lambda _m: pv, maven_id)
    parts = maven_id.split(":")
    group_id = parts[0] or package
    artifact_id = parts[1] if len(parts) > 1 and parts[1] else package
    maven_version = parts[2] if len(parts) > 2 and parts[2] else version
    return group_id, artifact_id, maven_version


def parse_ebuild(path: str, category: str, package: str, tree: Optional[str] = None) -> Optional[List[CacheRecord]]:
    """Extract cache records from the ebuild at ``path``.

    Args:
        path: Ebuild file path.
        category: Category directory name.
        package: Package directory name.
        tree: Repository root, used to find ``metadata/md5-cache``.

    Returns:
        Records for the ebuild, or None if it inherits no Java eclass.

    Raises:
        OSError: If the ebuild or its metadata cannot be read.
        EbuildParseError: For a malformed MAVEN_PROVIDES entry.
        InvalidVersionFormat: If a declared Maven version cannot be parsed.
    """
    filename = os.path.basename(path)[:-len(Constants.EBUILD_SUFFIX)]
    version = filename[len(package) + 1:]

    with open(path, "r", encoding="utf-8", errors="replace") as handle:
        facts = scan_lines(handle)

    if facts is None or facts.eclasses is None:
        return None

    use_flag = facts.use_flag
    if use_flag is None and Constants.ECLASS_JAVA_PKG_OPT in facts.eclasses:
        use_flag = Constants.DEFAULT_USE_FLAG

    pv = version.split("-", 1)[0]

    metadata = None
    if tree is not None:
        metadata = os.path.join(tree, Constants.METADATA_CACHE_DIR, category, filename)
    if metadata is not None and os.path.isfile(metadata):
        slot = read_metadata_slot(metadata, facts.slot)
    else:
        slot = expand_slot(facts.slot, pv, facts.variables)

    def _record(group_id=None, artifact_id=None, maven_version=None) -> CacheRecord:
        return CacheRecord(
            category=category,
            package=package,
            version=version,
            slot=slot,
            use_flag=use_flag,
            group_id=group_id,
            artifact_id=artifact_id,
            maven_version=maven_version,
            eclasses=facts.eclasses,
        )

    if facts.maven_id is None:
        if facts.maven_provides:
            logger.debug("%s declares MAVEN_PROVIDES without MAVEN_ID, ignoring it", path)
        return [_record()]

    records = [_record(*split_coordinate(facts.maven_id, package, pv, version))]
    for provided in facts.maven_provides:
        parts = provided.split(":")
        if len(parts) != 3 or not all(parts):
            raise EbuildParseError(path, f"MAVEN_PROVIDES entry {provided!r} is not group:artifact:version")
        records.append(_record(*parts))
    return records
