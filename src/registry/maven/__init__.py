"""Maven collaborators: effective pom retrieval and pom reading."""

from .effective_pom import EffectivePomError, get_effective_pom
from .pom_reader import read_dependencies, read_java_version

__all__ = [
    "EffectivePomError",
    "get_effective_pom",
    "read_dependencies",
    "read_java_version",
]
