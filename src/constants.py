"""Constants used in the project."""

import os
from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    EXTERNAL_TOOL_ERROR = 2
    EXIT_WARNINGS = 3
    DATA_ERROR = 4


class Commands(Enum):
    """Sub-commands supported by the program.

    Args:
        Enum (string): Sub-command names.
    """

    REFRESH = "refresh"
    RESOLVE = "resolve"
    DEPS = "deps"
    DUMP = "dump"
    KEYWORDS = "keywords"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    CACHE_VERSION = "1.1"
    CACHE_LEGACY_VERSIONS = ["1.0"]
    CACHE_HEADER = (
        "#category:pkg:version:slot:useFlag:groupId:artifactId:"
        "mavenVersion:javaEclass"
    )
    CACHE_FILE = os.path.join(os.path.expanduser("~"), ".java-ebuilder", "cache")
    PORTAGE_TREES = ["/var/db/repos/gentoo"]
    METADATA_CACHE_DIR = os.path.join("metadata", "md5-cache")
    NON_CATEGORY_DIRS = ["metadata", "profiles", "eclass", "licenses", "scripts"]
    EBUILD_SUFFIX = ".ebuild"

    ECLASS_PREFIX = "java-"
    ECLASS_ANT_TASKS = "ant-tasks"
    ECLASS_JAVA_PKG_OPT = "java-pkg-opt-2"
    DEFAULT_USE_FLAG = "java"
    DEFAULT_SLOT = "0"
    VIRTUAL_CATEGORY = "java-virtuals"

    MVN_COMMAND = "mvn"
    MVN_TIMEOUT = 60  # Timeout in seconds for the effective-pom helper

    CONFIG_ENV = "JAVA_EBUILDER_CONFIG"
    CONFIG_FILE = os.path.join(
        os.path.expanduser("~"), ".config", "java-ebuilder", "config.yml"
    )
    LOG_LEVEL_ENV = "JAVA_EBUILDER_LOG_LEVEL"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
