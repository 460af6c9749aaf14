"""Version parsing and the value types shared by the cache and scanner."""

from .errors import InvalidVersionFormat
from .java_version import JavaVersion
from .maven_version import MavenVersion

__all__ = [
    "InvalidVersionFormat",
    "JavaVersion",
    "MavenVersion",
]
