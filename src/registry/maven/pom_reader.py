"""Dependency coordinates and Java level from pom files.

Works on plain poms as well as on the output of ``help:effective-pom``, which
wraps multi-module builds in a ``<projects>`` root.
"""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import List, Optional

from versioning.errors import InvalidVersionFormat
from versioning.java_version import JavaVersion
from versioning.models import MavenDependency

logger = logging.getLogger(__name__)

NS = "{http://maven.apache.org/POM/4.0.0}"
JAVA_VERSION_PROPERTIES = (
    "maven.compiler.release",
    "maven.compiler.source",
    "maven.compiler.target",
)


def _local(tag: str) -> str:
    return tag.split("}", 1)[1] if "}" in tag else tag


def _child(element, name: str):
    found = element.find(f"{NS}{name}")
    if found is None:
        found = element.find(name)
    return found


def _text(element, name: str) -> Optional[str]:
    node = _child(element, name)
    if node is not None and node.text and node.text.strip():
        return node.text.strip()
    return None


def _projects(path: str) -> list:
    root = ET.parse(path).getroot()
    if _local(root.tag) == "projects":
        return [child for child in root if _local(child.tag) == "project"]
    return [root]


def read_dependencies(path: str) -> List[MavenDependency]:
    """Dependencies declared directly under ``<project><dependencies>``.

    Dependencies without a version (managed elsewhere and not resolved in
    this file) are skipped with a warning.

    Raises:
        ET.ParseError: If the file is not well-formed XML.
        OSError: If the file cannot be read.
    """
    result = []
    for project in _projects(path):
        dependencies = _child(project, "dependencies")
        if dependencies is None:
            continue
        for dependency in dependencies:
            if _local(dependency.tag) != "dependency":
                continue
            group_id = _text(dependency, "groupId")
            artifact_id = _text(dependency, "artifactId")
            version = _text(dependency, "version")
            if not group_id or not artifact_id:
                continue
            if not version:
                logger.warning("Dependency %s:%s has no version, skipping", group_id, artifact_id)
                continue
            optional = (_text(dependency, "optional") or "").lower() == "true"
            result.append(MavenDependency(
                group_id=group_id,
                artifact_id=artifact_id,
                version=version,
                scope=(_text(dependency, "scope") or "compile").lower(),
                optional=optional,
            ))
    return result


def read_java_version(path: str) -> Optional[JavaVersion]:
    """Highest Java level requested through ``maven.compiler.*`` properties.

    Raises:
        InvalidVersionFormat: If a property holds something that is not a
            Java version (unresolved ``${...}`` references are ignored).
    """
    best: Optional[JavaVersion] = None
    for project in _projects(path):
        properties = _child(project, "properties")
        if properties is None:
            continue
        for name in JAVA_VERSION_PROPERTIES:
            value = _text(properties, name)
            if not value or value.startswith("${"):
                continue
            try:
                version = JavaVersion.parse(value)
            except InvalidVersionFormat:
                logger.error("Property %s in %s has an invalid Java version", name, path)
                raise
            if best is None or version > best:
                best = version
    return best
