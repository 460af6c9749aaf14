"""Configuration file loading and CLI overrides for runtime tunables.

Precedence is CLI flags, then the YAML config file, then the defaults in
``Constants``.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when the configuration file cannot be parsed."""


def _config_path(explicit: Optional[str]) -> Optional[str]:
    if explicit:
        return explicit
    from_env = os.environ.get(Constants.CONFIG_ENV)
    if from_env:
        return from_env
    if os.path.isfile(Constants.CONFIG_FILE):
        return Constants.CONFIG_FILE
    return None


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML configuration.

    Args:
        config_path: Explicit path from ``--config``. When omitted,
            ``$JAVA_EBUILDER_CONFIG`` and then the default location are tried.

    Returns:
        The configuration mapping; empty when no file is found.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML or is not
            a mapping.
    """
    path = _config_path(config_path)
    if not path:
        return {}
    if not os.path.isfile(path):
        logger.warning("Config file not found: %s", path)
        return {}

    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    logger.debug("Loaded configuration from %s", path)
    return data


def apply_config(config: Dict[str, Any]) -> None:
    """Apply values from the configuration file to ``Constants``."""
    cache_file = config.get("cache_file")
    if cache_file:
        Constants.CACHE_FILE = os.path.expanduser(str(cache_file))

    trees = config.get("portage_trees")
    if isinstance(trees, str):
        trees = [trees]
    if trees:
        Constants.PORTAGE_TREES = [os.path.expanduser(str(t)) for t in trees]

    timeout = config.get("mvn_timeout")
    if timeout is not None:
        try:
            Constants.MVN_TIMEOUT = int(timeout)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"mvn_timeout must be an integer, got {timeout!r}") from exc

    virtual_category = config.get("virtual_category")
    if virtual_category:
        Constants.VIRTUAL_CATEGORY = str(virtual_category)


def apply_cli_overrides(args) -> None:
    """Apply CLI flags to ``Constants``; they win over the config file."""
    if getattr(args, "CACHE_FILE", None):
        Constants.CACHE_FILE = os.path.abspath(os.path.expanduser(args.CACHE_FILE))
    if getattr(args, "PORTAGE_TREE", None):
        Constants.PORTAGE_TREES = [
            os.path.abspath(os.path.expanduser(tree)) for tree in args.PORTAGE_TREE
        ]
    if getattr(args, "MVN_TIMEOUT", None) is not None:
        Constants.MVN_TIMEOUT = int(args.MVN_TIMEOUT)
