"""Argument parsing functionality for java-ebuilder."""

import argparse

from constants import Commands, Constants


def _add_common(parser):
    parser.add_argument("--cache-file",
                        dest="CACHE_FILE",
                        help="Path to the cache file (default: ~/.java-ebuilder/cache)",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (default: $JAVA_EBUILDER_LOG_LEVEL or INFO)",
                        action="store",
                        type=str,
                        choices=Constants.LOG_LEVELS,
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="java-ebuilder",
        description=(
            "java-ebuilder - Maven to Gentoo ebuild dependency mapper"
        ),
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="action", required=True)

    refresh = subparsers.add_parser(
        Commands.REFRESH.value,
        help="Scan portage trees and rebuild the cache",
    )
    _add_common(refresh)
    refresh.add_argument("-t", "--portage-tree",
                         dest="PORTAGE_TREE",
                         help="Portage tree to scan (repeatable, default: /var/db/repos/gentoo)",
                         action="append",
                         type=str)

    resolve = subparsers.add_parser(
        Commands.RESOLVE.value,
        help="Resolve groupId:artifactId:version coordinates to dependencies",
    )
    _add_common(resolve)
    resolve.add_argument("coordinates",
                         metavar="COORDINATE",
                         nargs="+",
                         help="Maven coordinate as groupId:artifactId:version")
    resolve.add_argument("--error-on-warnings",
                         dest="ERROR_ON_WARNINGS",
                         help="Exit with a non-zero status code if a coordinate cannot be resolved.",
                         action="store_true")

    deps = subparsers.add_parser(
        Commands.DEPS.value,
        help="Resolve the dependencies of pom files",
    )
    _add_common(deps)
    deps.add_argument("-p", "--pom",
                      dest="POM",
                      help="pom.xml to process (repeatable)",
                      action="append",
                      type=str,
                      required=True)
    deps.add_argument("-w", "--workdir",
                      dest="WORKDIR",
                      help="Directory the pom paths are relative to (default: current directory)",
                      action="store",
                      type=str,
                      default=".")
    deps.add_argument("--no-effective-pom",
                      dest="NO_EFFECTIVE_POM",
                      help="Read the pom files directly instead of running mvn help:effective-pom",
                      action="store_true")
    deps.add_argument("--mvn-timeout",
                      dest="MVN_TIMEOUT",
                      help="Seconds to wait for mvn (default: 60)",
                      action="store",
                      type=int)
    deps.add_argument("--force-min-java-version",
                      dest="FORCE_MIN_JAVA_VERSION",
                      help="Minimum Java version regardless of the pom settings",
                      action="store",
                      type=str)
    deps.add_argument("--error-on-warnings",
                      dest="ERROR_ON_WARNINGS",
                      help="Exit with a non-zero status code if a dependency cannot be resolved.",
                      action="store_true")

    dump = subparsers.add_parser(
        Commands.DUMP.value,
        help="Print the cache contents",
    )
    _add_common(dump)
    dump.add_argument("-g", "--group",
                      dest="GROUP",
                      help="Only print records mapped to this groupId",
                      action="store",
                      type=str)

    keywords = subparsers.add_parser(
        Commands.KEYWORDS.value,
        help="Merge and sort KEYWORDS",
    )
    _add_common(keywords)
    keywords.add_argument("-k", "--keywords",
                          dest="KEYWORDS",
                          help="Keywords to merge (repeatable, space separated)",
                          action="append",
                          type=str,
                          required=True)

    return parser.parse_args(argv)
