# -*- coding: utf-8 -*-
import os

import pytest
from pydantic import ValidationError

from plan.config_models import (
    AuxPackages,
    ComponentSelection,
    InstallSet,
    SourceMode,
)


def test_plan_is_immutable(plan):
    with pytest.raises(ValidationError):
        plan.version = "5.1.0"


def test_version_must_have_three_parts(make_plan):
    with pytest.raises(ValidationError, match="major.minor.patch"):
        make_plan(version="5.1")


def test_svn_mode_requires_path(make_plan):
    with pytest.raises(ValidationError, match="repository path"):
        make_plan(source_mode=SourceMode.SVN)


def test_git_mode_requires_url(make_plan):
    with pytest.raises(ValidationError, match="repository URL"):
        make_plan(source_mode=SourceMode.GIT)


def test_with_components_returns_new_plan(plan):
    selection = ComponentSelection(findlib=True, opam=True, utop=True)

    updated = plan.with_components(selection)

    assert updated.components == selection
    assert plan.components == ComponentSelection()
    assert updated.install_dir == plan.install_dir


def test_derived_paths(plan, tmp_path):
    install_dir = tmp_path / "brew" / "ocaml-4.14.2"

    assert plan.install_dir == install_dir
    assert plan.src_dir == tmp_path / "brew" / "src"
    assert plan.bin_dir == install_dir / "bin"
    assert plan.ocaml_lib_dir == install_dir / "lib" / "ocaml"
    assert plan.rc_file == install_dir / "etc" / "ocamlbrew.bashrc"
    assert plan.effective_opam_root == install_dir / "opam"


def test_explicit_opam_root(make_plan, tmp_path):
    plan = make_plan(opam_root=tmp_path / "opam-root")
    assert plan.effective_opam_root == tmp_path / "opam-root"


@pytest.mark.parametrize(
    "git_url, revision, expected",
    [
        ("https://github.com/ocaml/ocaml.git", None, "ocaml"),
        ("https://github.com/ocaml/ocaml.git", "4.14", "ocaml-4.14"),
        ("https://example.org/forks/flambda-backend/", "main", "flambda-backend-main"),
    ],
)
def test_git_locator(make_plan, git_url, revision, expected):
    plan = make_plan(source_mode=SourceMode.GIT, git_url=git_url, git_revision=revision)
    assert plan.vcs_locator == expected


def test_archive_mode_has_no_locator(plan):
    assert plan.vcs_locator is None
    assert plan.source_description == "OCaml 4.14.2"


def test_command_env_puts_toolchain_first(plan, monkeypatch):
    monkeypatch.setenv("PATH", "/usr/bin")

    env = plan.command_env()

    assert env["PATH"] == os.pathsep.join([str(plan.bin_dir), "/usr/bin"])


def test_opam_env(plan):
    env = plan.opam_env()

    assert env["OPAMROOT"] == str(plan.effective_opam_root)
    assert env["OPAMYES"] == "1"
    assert env["PATH"].startswith(str(plan.bin_dir))


def test_selection_for_install_set():
    selection = ComponentSelection.for_install_set(InstallSet.WITH_FINDLIB_OPAM_TOOL)

    assert selection.selected_tools() == ["odoc"]
    assert selection.is_selected("findlib")
    assert not selection.is_selected("utop")
    assert not selection.is_selected("no-such-component")


def test_aux_packages_lookup():
    packages = AuxPackages(utop="utop-full")
    assert packages.for_tool("utop") == "utop-full"
    assert packages.for_tool("odoc") == "odoc"
