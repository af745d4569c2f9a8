# -*- coding: utf-8 -*-
import subprocess
from pathlib import Path

import pytest
import requests

from installer.base_component import (
    ArchiveComponent,
    BaseComponent,
    Stage,
    StageError,
)


class RecordingComponent(BaseComponent):
    name = "recording"

    def __init__(self, plan, logger=None, failure=None):
        super().__init__(plan, logger)
        self.failure = failure
        self.calls = []

    def retrieve(self):
        self.calls.append("retrieve")
        if self.failure:
            raise self.failure
        return Path("/src/recording-1.0")

    def build(self, source_root):
        self.calls.append(("build", source_root))

    def install(self, source_root):
        self.calls.append(("install", source_root))


class TarballComponent(ArchiveComponent):
    name = "tarball"

    def archive_url(self):
        return "https://example.org/tarball-1.0.tar.gz"

    def build(self, source_root):
        pass

    def install(self, source_root):
        pass


def test_run_stage_returns_source_root_from_retrieve(plan, mock_logger):
    component = RecordingComponent(plan, mock_logger)

    result = component.run_stage(Stage.RETRIEVE)

    assert result.ok
    assert result.component == "recording"
    assert result.source_root == Path("/src/recording-1.0")


def test_run_stage_passes_source_root(plan, mock_logger):
    component = RecordingComponent(plan, mock_logger)

    result = component.run_stage(Stage.BUILD, Path("/src/tree"))

    assert result.ok
    assert component.calls == [("build", Path("/src/tree"))]


@pytest.mark.parametrize(
    "failure",
    [
        subprocess.CalledProcessError(2, ["make"]),
        FileNotFoundError(2, "No such file", "svn"),
        requests.exceptions.HTTPError("404"),
        StageError("patch missing"),
    ],
)
def test_run_stage_turns_failures_into_results(plan, mock_logger, failure):
    component = RecordingComponent(plan, mock_logger, failure=failure)

    result = component.run_stage(Stage.RETRIEVE)

    assert not result.ok
    assert result.stage is Stage.RETRIEVE
    assert result.error == str(failure)
    mock_logger.error.assert_called_once()


def test_run_stage_propagates_programming_errors(plan, mock_logger):
    component = RecordingComponent(plan, mock_logger, failure=TypeError("bug"))

    with pytest.raises(TypeError):
        component.run_stage(Stage.RETRIEVE)


def test_run_uses_toolchain_environment(mocker, plan, mock_logger):
    mock_run_command = mocker.patch("installer.base_component.run_command")
    component = RecordingComponent(plan, mock_logger)

    component.make("install", cwd=Path("/src/tree"))

    args, kwargs = mock_run_command.call_args
    assert args[0] == ["make", "install"]
    assert kwargs["cwd"] == Path("/src/tree")
    assert kwargs["check"] is True
    assert kwargs["env"]["PATH"].startswith(str(plan.bin_dir))


def test_make_uses_configured_tool(mocker, make_plan, mock_logger):
    mock_run_command = mocker.patch("installer.base_component.run_command")
    component = RecordingComponent(make_plan(make="gmake"), mock_logger)

    component.make(cwd=Path("/src/tree"))

    assert mock_run_command.call_args.args[0] == ["gmake"]


def test_archive_component_downloads_and_extracts(mocker, plan, mock_logger):
    mock_download = mocker.patch(
        "installer.base_component.download_file",
        return_value=plan.src_dir / "tarball-1.0.tar.gz",
    )
    mock_extract = mocker.patch(
        "installer.base_component.extract_archive",
        return_value=plan.src_dir / "tarball-1.0",
    )

    source_root = TarballComponent(plan, mock_logger).retrieve()

    assert source_root == plan.src_dir / "tarball-1.0"
    mock_download.assert_called_once_with(
        "https://example.org/tarball-1.0.tar.gz", plan.src_dir, current_logger=mock_logger
    )
    mock_extract.assert_called_once_with(
        plan.src_dir / "tarball-1.0.tar.gz", plan.src_dir, current_logger=mock_logger
    )


def test_description_falls_back_to_name(plan):
    assert RecordingComponent(plan).get_description() == "recording"


def test_archive_component_requires_archive_url(plan):
    class NoUrlComponent(ArchiveComponent):
        def build(self, source_root):
            pass

        def install(self, source_root):
            pass

    with pytest.raises(TypeError):
        NoUrlComponent(plan)
