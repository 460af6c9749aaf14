"""java-ebuilder - Maven to Gentoo ebuild dependency mapper.

Maintains a cache mapping Maven coordinates to the Java packages of one or
more Portage trees and resolves Maven dependencies against it.
"""
import logging
import os
import sys
import xml.etree.ElementTree as ET

from args import parse_args
from cache import CacheFormatError, DependencyCache, UnsupportedCacheVersion
from cache.cache_file import format_line
from cli_config import ConfigError, apply_cli_overrides, apply_config, load_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Commands, Constants, ExitCodes
from registry.maven import (
    EffectivePomError,
    get_effective_pom,
    read_dependencies,
    read_java_version,
)
from repository import EbuildParseError, KeywordSet, RepositoryScanError, scan_trees
from versioning import InvalidVersionFormat, JavaVersion

logger = logging.getLogger(__name__)


def split_coordinate(token):
    """Split ``groupId:artifactId:version`` into its three parts.

    Returns:
        tuple: (group, artifact, version) or None when the token is malformed.
    """
    parts = token.strip().split(":", 2)
    if len(parts) != 3 or not all(parts):
        return None
    return parts[0], parts[1], parts[2]


def refresh_cache(trees, cache_file):
    """Scans the portage trees and rewrites the cache file.

    Args:
        trees (list): Portage tree paths.
        cache_file (str): Cache file path.
    """
    for tree in trees:
        if not os.path.isdir(tree):
            logging.error("Portage tree %s does not exist.", tree)
            sys.exit(ExitCodes.FILE_ERROR.value)

    try:
        session = scan_trees(trees)
    except RepositoryScanError as e:
        logging.error("%s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except (EbuildParseError, InvalidVersionFormat) as e:
        logging.error("%s, aborting", e)
        sys.exit(ExitCodes.DATA_ERROR.value)

    logging.info("Writing cache file %s ...", cache_file)
    try:
        count = DependencyCache.store(session.records, cache_file)
    except OSError as e:
        logging.error("Failed to write cache file @ %s: %s", cache_file, e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    logging.info("Wrote %d cache records.", count)
    return session


def load_cache(cache_file):
    """Loads the cache file or exits with a diagnostic.

    Args:
        cache_file (str): Cache file path.

    Returns:
        DependencyCache: The loaded cache.
    """
    if not os.path.isfile(cache_file):
        logging.error(
            "Cache file %s does not exist. First you must generate it using "
            "the 'refresh' command.", cache_file
        )
        sys.exit(ExitCodes.FILE_ERROR.value)
    try:
        return DependencyCache.load(cache_file, virtual_category=Constants.VIRTUAL_CATEGORY)
    except UnsupportedCacheVersion as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.DATA_ERROR.value)
    except CacheFormatError as e:
        logging.error("Malformed cache file: %s", e)
        sys.exit(ExitCodes.DATA_ERROR.value)
    except OSError as e:
        logging.error("Failed to load cache: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def resolve_coordinates(cache, coordinates):
    """Resolves Maven coordinates and prints the dependency strings.

    Args:
        cache (DependencyCache): Loaded cache.
        coordinates (list): ``groupId:artifactId:version`` strings.

    Returns:
        int: Number of coordinates that could not be resolved.
    """
    unresolved = 0
    for token in coordinates:
        parts = split_coordinate(token)
        if parts is None:
            logging.error("Coordinate %r is not groupId:artifactId:version", token)
            sys.exit(ExitCodes.DATA_ERROR.value)
        try:
            result = cache.resolve(*parts)
        except InvalidVersionFormat as e:
            logging.error("%s", e)
            sys.exit(ExitCodes.DATA_ERROR.value)
        if not result.found:
            unresolved += 1
            logging.warning("%s could not be resolved: %s", token, result.status.value)
        print(f"{token} -> {result}")
    return unresolved


def _pom_dependencies(pom, workdir, use_effective_pom):
    pom_path = pom if os.path.isabs(pom) else os.path.join(workdir, pom)
    if not os.path.isfile(pom_path):
        logging.error("POM file %s does not exist.", pom_path)
        sys.exit(ExitCodes.FILE_ERROR.value)

    source = pom_path
    if use_effective_pom:
        try:
            source = get_effective_pom(pom_path, workdir=workdir, timeout=Constants.MVN_TIMEOUT)
        except EffectivePomError as e:
            logging.error("%s", e)
            sys.exit(ExitCodes.EXTERNAL_TOOL_ERROR.value)
    try:
        return read_dependencies(source), read_java_version(source)
    except ET.ParseError as e:
        logging.error("Failed to parse %s: %s", source, e)
        sys.exit(ExitCodes.DATA_ERROR.value)
    except InvalidVersionFormat as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.DATA_ERROR.value)
    finally:
        if source != pom_path and os.path.exists(source):
            os.unlink(source)


def resolve_poms(cache, poms, workdir, use_effective_pom=True, forced_java=None):
    """Resolves the dependencies of pom files against the cache.

    Args:
        cache (DependencyCache): Loaded cache.
        poms (list): pom.xml paths.
        workdir (str): Directory the pom paths are relative to.
        use_effective_pom (bool): Run mvn help:effective-pom first.
        forced_java (JavaVersion, optional): Minimum Java version to report.

    Returns:
        int: Number of dependencies that could not be resolved.
    """
    unresolved = 0
    java_version = forced_java
    for pom in poms:
        dependencies, pom_java = _pom_dependencies(pom, workdir, use_effective_pom)
        if pom_java is not None and (java_version is None or pom_java > java_version):
            java_version = pom_java
        print(f"# {pom}")
        for dep in dependencies:
            try:
                result = cache.resolve(dep.group_id, dep.artifact_id, dep.version)
            except InvalidVersionFormat as e:
                logging.error("Dependency %s: %s", dep.coordinate, e)
                sys.exit(ExitCodes.DATA_ERROR.value)
            if not result.found:
                unresolved += 1
            print(f"{dep.scope}\t{dep.coordinate}\t{result}")
    if java_version is not None:
        print(f"# minimum java version: {java_version}")
    return unresolved


def dump_cache(cache, group_id=None):
    """Prints cache records, optionally only those of one group."""
    for record in cache.records_for_group(group_id):
        print(format_line(record))


def merge_keywords(keyword_args):
    """Prints the merged and sorted keyword list."""
    keywords = KeywordSet()
    for value in keyword_args:
        keywords.update(value)
    print(keywords)


def setup(args):
    """Configures logging and applies config file and CLI overrides."""
    configure_logging(args.LOG_LEVEL, getattr(args, "LOG_FILE", None))
    try:
        apply_config(load_config(getattr(args, "CONFIG", None)))
    except ConfigError as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    apply_cli_overrides(args)


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    setup(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.action)
        )

    unresolved = 0
    if args.action == Commands.REFRESH.value:
        refresh_cache(Constants.PORTAGE_TREES, Constants.CACHE_FILE)
    elif args.action == Commands.RESOLVE.value:
        cache = load_cache(Constants.CACHE_FILE)
        unresolved = resolve_coordinates(cache, args.coordinates)
    elif args.action == Commands.DEPS.value:
        forced = None
        if args.FORCE_MIN_JAVA_VERSION:
            try:
                forced = JavaVersion.parse(args.FORCE_MIN_JAVA_VERSION)
            except InvalidVersionFormat as e:
                logging.error("%s", e)
                sys.exit(ExitCodes.DATA_ERROR.value)
        cache = load_cache(Constants.CACHE_FILE)
        unresolved = resolve_poms(
            cache,
            args.POM,
            os.path.abspath(args.WORKDIR),
            use_effective_pom=not args.NO_EFFECTIVE_POM,
            forced_java=forced,
        )
    elif args.action == Commands.DUMP.value:
        dump_cache(load_cache(Constants.CACHE_FILE), args.GROUP)
    elif args.action == Commands.KEYWORDS.value:
        merge_keywords(args.KEYWORDS)

    if unresolved:
        logging.warning("%d dependencies could not be resolved.", unresolved)
        if getattr(args, "ERROR_ON_WARNINGS", False):
            logging.error("Warnings present, exiting with non-zero status code.")
            sys.exit(ExitCodes.EXIT_WARNINGS.value)

    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
