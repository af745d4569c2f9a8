# tests/conftest.py
import logging
import os
from unittest.mock import MagicMock

import pytest

from common.logging_config import LogChannel
from plan.config_models import InstallPlan


@pytest.fixture(autouse=True)
def clean_ocamlbrew_env(monkeypatch):
    """Keep OCAMLBREW_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("OCAMLBREW_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_plan(tmp_path):
    def _make_plan(**overrides):
        values = {
            "base_dir": tmp_path / "brew",
            "version": "4.14.2",
            "archive_url": "https://example.org/ocaml-4.14.2.tar.gz",
            "log_file": tmp_path / "ocamlbrew.log",
            "findlib_url": "https://example.org/findlib-1.9.6.tar.gz",
            "opam_url": "https://example.org/opam-full-2.1.6.tar.gz",
        }
        values.update(overrides)
        return InstallPlan(**values)

    return _make_plan


@pytest.fixture
def plan(make_plan):
    return make_plan()


@pytest.fixture
def mock_logger():
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def mock_channel():
    return MagicMock(spec=LogChannel)
