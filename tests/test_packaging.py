"""Tests for the install layout declared in pyproject.toml."""
from __future__ import annotations

from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

ROOT = Path(__file__).parent.parent


def _pyproject() -> dict:
    return tomllib.loads((ROOT / "pyproject.toml").read_text())


def test_installs_as_cathy_not_pkg():
    setuptools_cfg = _pyproject()["tool"]["setuptools"]
    assert setuptools_cfg["packages"] == ["cathy"]
    assert setuptools_cfg["package-dir"] == {"cathy": "pkg/cathy"}
    assert (ROOT / "pkg" / "cathy" / "__init__.py").is_file()


def test_console_script_targets_installed_package():
    scripts = _pyproject()["project"]["scripts"]
    assert scripts == {"cathy": "cathy.cli:main"}
    assert (ROOT / "pkg" / "cathy" / "cli.py").is_file()
