import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from analyzer.trace import set_verbose


@pytest.fixture(autouse=True)
def quiet():
    """Every test starts and ends with verbose logging off."""
    set_verbose(False)
    yield
    set_verbose(False)


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run in an empty working directory with an empty home directory."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    return work
