"""Data models for cache records and dependency resolution."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .maven_version import MavenVersion

PATTERN_REVISION = re.compile(r"-r\d+")


@dataclass(frozen=True)
class CacheRecord:
    """One Gentoo package version, optionally mapped to a Maven coordinate.

    Records without a coordinate still describe a buildable package and are
    kept for inventory, but never answer a dependency query.
    """

    category: str
    package: str
    version: str
    slot: str
    use_flag: Optional[str] = None
    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    maven_version: Optional[str] = None
    eclasses: Tuple[str, ...] = ()
    parsed_version: Optional[MavenVersion] = field(
        default=None, init=False, compare=False, repr=False
    )

    def __post_init__(self):
        object.__setattr__(self, "eclasses", tuple(self.eclasses))
        if self.maven_version is not None:
            object.__setattr__(
                self, "parsed_version", MavenVersion.parse(self.maven_version)
            )

    @property
    def has_coordinate(self) -> bool:
        """True when the record carries a Maven group id."""
        return self.group_id is not None

    @property
    def bare_version(self) -> str:
        """Package version with the ``-rN`` revision removed."""
        return PATTERN_REVISION.sub("", self.version)

    @property
    def atom(self) -> str:
        """``category/package`` of the record."""
        return f"{self.category}/{self.package}"

    @property
    def coordinate(self) -> Optional[str]:
        """``group:artifact:version`` or None when no coordinate is mapped."""
        if not self.has_coordinate:
            return None
        return f"{self.group_id}:{self.artifact_id}:{self.maven_version}"


class ResolutionStatus(Enum):
    """Outcome of a cache lookup."""

    FOUND = "found"
    GROUP_NOT_FOUND = "groupId-not-found"
    ARTIFACT_NOT_FOUND = "artifactId-not-found"
    VERSION_NOT_FOUND = "suitable-mavenVersion-not-found"


@dataclass(frozen=True)
class ResolutionResult:
    """Result of resolving one Maven coordinate against the cache.

    ``str()`` yields the dependency string when found, otherwise a sentinel
    such as ``!!!groupId-not-found!!!`` meant to be embedded verbatim in
    generated ebuilds so a reviewer notices it.
    """

    status: ResolutionStatus
    group_id: str
    artifact_id: str
    version: str
    dependency: Optional[str] = None
    record: Optional[CacheRecord] = None

    @property
    def found(self) -> bool:
        """True for a successful lookup."""
        return self.status is ResolutionStatus.FOUND

    def __str__(self) -> str:
        if self.found:
            return self.dependency or ""
        return f"!!!{self.status.value}!!!"


@dataclass
class MavenDependency:
    """A ``<dependency>`` read from a pom file.

    Attributes:
        group_id: Maven groupId.
        artifact_id: Maven artifactId.
        version: Version or version range as declared.
        scope: Maven scope; ``compile`` when not declared.
        optional: Whether ``<optional>true</optional>`` was set.
    """
    group_id: str
    artifact_id: str
    version: str
    scope: str = "compile"
    optional: bool = False

    @property
    def coordinate(self) -> str:
        """``group:artifact:version`` of the dependency."""
        return f"{self.group_id}:{self.artifact_id}:{self.version}"
