# -*- coding: utf-8 -*-
import pytest

from plan.cli_handler import (
    ask_yes_no,
    plan_components_interactively,
    resolve_components,
    summarize_plan,
)
from plan.config_models import ComponentSelection, InstallSet


@pytest.mark.parametrize(
    "answer, expected",
    [("y", True), ("Y", True), ("  y ", True), ("n", False), ("yes", False), ("", False)],
)
def test_ask_yes_no(mock_channel, answer, expected):
    mock_channel.prompt.return_value = answer

    assert ask_yes_no(mock_channel, "Install findlib?") is expected
    mock_channel.prompt.assert_called_once_with("Install findlib? (y/n) ")


def test_full_question_sequence(plan, mock_channel):
    # findlib, OPAM, odoc, utop, batteries, ocamlscript
    mock_channel.prompt.side_effect = ["y", "y", "n", "y", "n", "y"]

    selection = plan_components_interactively(plan, mock_channel)

    assert selection == ComponentSelection(
        findlib=True, opam=True, odoc=False, utop=True, batteries=False, ocamlscript=True
    )
    assert mock_channel.prompt.call_count == 6


def test_declining_findlib_skips_everything(plan, mock_channel):
    mock_channel.prompt.side_effect = ["n"]

    selection = plan_components_interactively(plan, mock_channel)

    assert selection == ComponentSelection()
    assert mock_channel.prompt.call_count == 1


def test_declining_opam_skips_tools(plan, mock_channel):
    mock_channel.prompt.side_effect = ["Y", "n"]

    selection = plan_components_interactively(plan, mock_channel)

    assert selection == ComponentSelection(findlib=True)
    assert mock_channel.prompt.call_count == 2


def test_tool_question_names_package(make_plan, mock_channel):
    plan = make_plan()
    mock_channel.prompt.side_effect = ["y", "y", "y", "n", "n", "n"]

    plan_components_interactively(plan, mock_channel)

    assert mock_channel.prompt.call_args_list[2].args[0] == (
        "Install odoc (documentation generator) with OPAM? (y/n) "
    )


def test_batch_plan_never_prompts(make_plan, mock_channel):
    plan = make_plan(
        install_set=InstallSet.WITH_OPAM,
        components=ComponentSelection.for_install_set(InstallSet.WITH_OPAM),
    )

    final_plan = resolve_components(plan, mock_channel)

    assert final_plan is plan
    mock_channel.prompt.assert_not_called()
    assert mock_channel.say.called


def test_interactive_plan_confirmed(plan, mock_channel):
    mock_channel.prompt.side_effect = ["y", "n", "y"]

    final_plan = resolve_components(plan, mock_channel)

    assert final_plan.components == ComponentSelection(findlib=True)
    assert mock_channel.prompt.call_args_list[-1].args[0] == "Continue? (y/n) "
    mock_channel.restore.assert_not_called()


def test_declining_confirmation_removes_log(plan, mock_channel):
    plan.log_file.write_text("started\n", encoding="utf-8")
    mock_channel.prompt.side_effect = ["n", "n"]

    assert resolve_components(plan, mock_channel) is None
    mock_channel.restore.assert_called_once()
    assert not plan.log_file.exists()


def test_end_of_input_declines(plan, mock_channel):
    mock_channel.prompt.return_value = ""

    assert resolve_components(plan, mock_channel) is None


def test_summarize_plan(make_plan, tmp_path):
    plan = make_plan(
        components=ComponentSelection(findlib=True, opam=True, batteries=True),
        configure_flags=["-no-shared-libs"],
        patch=tmp_path / "fix.patch",
    )

    lines = summarize_plan(plan)

    assert "  - OCaml 4.14.2" in lines
    assert "  - findlib" in lines
    assert "  - OPAM" in lines
    assert "  - batteries (utility library, via OPAM)" in lines
    assert not any("utop" in line for line in lines)
    assert any("-no-shared-libs" in line for line in lines)
    assert any(str(tmp_path / "fix.patch") in line for line in lines)
    assert any(str(plan.log_file) in line for line in lines)
