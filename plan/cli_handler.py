# plan/cli_handler.py
# -*- coding: utf-8 -*-
"""
Handles the interactive part of planning an ocamlbrew run.

When no install-set flag was given, the user answers a fixed sequence of
yes/no questions that decide which components run. The resulting plan is
then summarised and, outside batch mode, confirmed before anything is built.
"""

import logging
from typing import List, Optional

from common.file_utils import remove_file
from common.logging_config import LogChannel
from plan.config import AUX_DESCRIPTIONS, AUX_TOOLS, SYMBOLS
from plan.config_models import ComponentSelection, InstallPlan

module_logger = logging.getLogger(__name__)


def ask_yes_no(channel: LogChannel, question: str) -> bool:
    """
    Ask a yes/no question on the terminal.

    Returns:
        True only if the answer is "y" or "Y". End of input counts as no.
    """
    answer = channel.prompt(f"{question} (y/n) ")
    return answer.strip().lower() == "y"


def plan_components_interactively(
    plan: InstallPlan,
    channel: LogChannel,
    current_logger: Optional[logging.Logger] = None,
) -> ComponentSelection:
    """
    Decide the optional components by asking the user.

    findlib comes first; declining it skips every other question. Declining
    OPAM skips the auxiliary tools. Each auxiliary tool is asked about on its
    own, so declining one does not affect the others.
    """
    logger_to_use = current_logger if current_logger else module_logger

    if not ask_yes_no(channel, "Install findlib?"):
        selection = ComponentSelection()
    elif not ask_yes_no(channel, "Install OPAM?"):
        selection = ComponentSelection(findlib=True)
    else:
        tools = {
            tool: ask_yes_no(
                channel,
                f"Install {plan.packages.for_tool(tool)} ({AUX_DESCRIPTIONS[tool]}) with OPAM?",
            )
            for tool in AUX_TOOLS
        }
        selection = ComponentSelection(findlib=True, opam=True, **tools)

    logger_to_use.info(f"Interactive component selection: {selection.model_dump()}")
    return selection


def summarize_plan(plan: InstallPlan) -> List[str]:
    """Human-readable lines describing exactly what will be installed."""
    lines = [
        f"{SYMBOLS['info']} Installing into {plan.install_dir}",
        f"{SYMBOLS['info']} The following will be installed:",
        f"  - {plan.source_description}",
    ]
    if plan.components.findlib:
        lines.append("  - findlib")
    if plan.components.opam:
        lines.append("  - OPAM")
    for tool in plan.components.selected_tools():
        lines.append(
            f"  - {plan.packages.for_tool(tool)} ({AUX_DESCRIPTIONS[tool]}, via OPAM)"
        )
    if plan.patch:
        lines.append(f"{SYMBOLS['info']} Patch applied to OCaml: {plan.patch}")
    if plan.configure_flags:
        lines.append(
            f"{SYMBOLS['info']} Extra configure flags: {' '.join(plan.configure_flags)}"
        )
    lines.append(f"{SYMBOLS['info']} Build output is logged to {plan.log_file}")
    return lines


def resolve_components(
    plan: InstallPlan,
    channel: LogChannel,
    current_logger: Optional[logging.Logger] = None,
) -> Optional[InstallPlan]:
    """
    Complete the plan's component selection and get the go-ahead.

    Args:
        plan: The plan from the configuration resolver.
        channel: The open log channel used for prompts and notices.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        The final plan, or None if the user declined to continue. In that case
        the channel has been restored and the log file removed.
    """
    logger_to_use = current_logger if current_logger else module_logger

    if not plan.batch_mode:
        plan = plan.with_components(
            plan_components_interactively(plan, channel, logger_to_use)
        )

    for line in summarize_plan(plan):
        channel.say(line)

    if plan.batch_mode or ask_yes_no(channel, "Continue?"):
        return plan

    logger_to_use.info("User declined to continue.")
    channel.restore()
    remove_file(plan.log_file, current_logger=logger_to_use)
    return None
