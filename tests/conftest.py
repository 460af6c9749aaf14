"""Shared fixtures for the java-ebuilder test suite."""

import os
import textwrap

import pytest

from constants import Constants

_TUNABLES = ("CACHE_FILE", "PORTAGE_TREES", "MVN_TIMEOUT", "VIRTUAL_CATEGORY")


@pytest.fixture(autouse=True)
def restore_constants(monkeypatch):
    """Keep CLI/config overrides from leaking between tests."""
    saved = {name: getattr(Constants, name) for name in _TUNABLES}
    monkeypatch.delenv(Constants.CONFIG_ENV, raising=False)
    monkeypatch.setattr(Constants, "CONFIG_FILE", os.path.join(os.sep, "nonexistent", "config.yml"))
    yield
    for name, value in saved.items():
        setattr(Constants, name, value)


@pytest.fixture
def portage_tree(tmp_path):
    """Factory writing ebuilds into a temporary Portage tree.

    Usage: ``portage_tree({"dev-java/junit/junit-4.13.2.ebuild": "..."})``
    returns the tree root.
    """
    root = tmp_path / "tree"

    def _write(files):
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content), encoding="utf-8")
        root.mkdir(exist_ok=True)
        return root

    return _write


@pytest.fixture
def write_cache(tmp_path):
    """Factory writing a raw cache file and returning its path."""
    def _write(content, name="cache"):
        path = tmp_path / name
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return str(path)
    return _write
