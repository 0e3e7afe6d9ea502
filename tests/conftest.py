"""Shared fixtures for Plumpkin tests."""

import logging
from pathlib import Path

import pytest


@pytest.fixture
def write_module(tmp_path):
    """Return a helper that writes a Python module under tmp_path."""

    def _write(relative: str, body: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def project(tmp_path, write_module):
    """Project tree with modules referenced by the sample import map."""
    write_module("src/logger.py", 'NAME = "logger"\n')
    write_module("src/legacy/old_logger.py", 'NAME = "old-logger"\n')
    write_module("src/lib/other.py", 'NAME = "lib-other"\n')
    write_module("src/special_lib/x.py", 'NAME = "special-x"\n')
    write_module("src/utils/helper.py", "def capitalize(s):\n    return s[:1].upper() + s[1:]\n")
    write_module("src/utils/advanced/formatter.py", 'def format(s):\n    return f"[FORMATTED] {s}"\n')
    return tmp_path


@pytest.fixture
def sample_config():
    return {
        "importmap": {
            "imports": {
                "logger": "./src/logger.py",
                "lib/": "./src/lib/",
                "lib/special/": "./src/special_lib/",
                "utils/": "./src/utils/",
            },
            "scopes": {
                "./src/legacy/": {"logger": "./src/legacy/old_logger.py"},
            },
        }
    }


@pytest.fixture
def restore_root_logger():
    """Remove handlers added to the root logger during a test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
