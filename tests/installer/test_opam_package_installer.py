# -*- coding: utf-8 -*-
import pytest

from installer.base_component import Stage, StageError
from installer.components.opam_package.opam_package_installer import OpamPackageInstaller
from plan.config_models import AuxPackages


def test_single_install_stage(plan):
    driver = OpamPackageInstaller.create("utop", plan)

    assert driver.stages == (Stage.INSTALL,)
    assert driver.name == "utop"
    assert driver.get_description() == "utop (interactive toplevel)"


def test_installs_configured_package(mocker, make_plan, mock_logger):
    plan = make_plan(packages=AuxPackages(batteries="batteries-included"))
    driver = OpamPackageInstaller(plan, "batteries", mock_logger)
    mocker.patch.object(driver, "run")

    result = driver.run_stage(Stage.INSTALL)

    assert result.ok
    args, kwargs = driver.run.call_args
    assert args[0] == [plan.bin_dir / "opam", "install", "batteries-included"]
    assert kwargs["env"]["OPAMYES"] == "1"


def test_no_retrieve_or_build(plan):
    driver = OpamPackageInstaller(plan, "odoc")

    with pytest.raises(StageError):
        driver.retrieve()
    with pytest.raises(StageError):
        driver.build(None)
