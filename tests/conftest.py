"""Pytest fixtures shared by all tests."""

import os

import pytest


@pytest.fixture
def hierarchy():
    """Frozen shop hierarchy (see tests.helpers.SHOP_ROWS)."""
    from tests.helpers import make_hierarchy

    return make_hierarchy()


@pytest.fixture
def scenario_hierarchy():
    """System a with container a1, system b with container b1."""
    from tests.helpers import make_hierarchy

    return make_hierarchy(
        [
            ("system", "a", None),
            ("container", "a1", "a"),
            ("system", "b", None),
            ("container", "b1", "b"),
        ],
        title="Scenario",
    )


@pytest.fixture
def project_dir(tmp_path, monkeypatch):
    """Directory with catalogue/ and flows/, set as the working directory."""
    from tests.helpers import write_project

    write_project(tmp_path)
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("ARCHFLOW_"):
            monkeypatch.delenv(name)
    return tmp_path
