"""Shared fixtures for Dead Hunt tests."""
import textwrap
from pathlib import Path

import pytest

from deadhunt.analyzer.parser import LanguageParser
from deadhunt.config import reset_config

FIXTURES_DIR = Path(__file__).parent / 'fixtures'

ENV_VARS = [
    'DEADHUNT_SCAN_DIR',
    'DEADHUNT_EXTENSIONS',
    'DEADHUNT_EXPORT_IGNORE',
    'DEADHUNT_USAGE_IGNORE',
    'DEADHUNT_CATEGORIES',
]


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Start every test with a fresh Config and no DEADHUNT_* variables.

    setenv before delenv makes monkeypatch remove anything a .env file
    loads during the test.
    """
    for name in ENV_VARS:
        monkeypatch.setenv(name, '')
        monkeypatch.delenv(name)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def write_tree(tmp_path):
    """Write {relative_path: source} into tmp_path and return the root."""
    def _write(files):
        for rel_path, content in files.items():
            path = tmp_path / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip())
        return tmp_path
    return _write


def parse_tsx(source: str):
    """Parse TSX source, failing the test if it does not parse."""
    tree = LanguageParser('tsx').parse_source(textwrap.dedent(source).encode('utf-8'))
    assert tree is not None, f"fixture source failed to parse:\n{source}"
    return tree


@pytest.fixture
def parse():
    return parse_tsx
