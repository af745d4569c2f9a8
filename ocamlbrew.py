#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Entry point for ocamlbrew.

Resolves the install plan from flags and environment, redirects all output
to the log file, asks which components to install (unless an install-set
flag was given) and runs the component pipeline.
"""

import logging
import sys
from typing import List, Optional

from common.logging_config import LogChannel, setup_logging
from installer.orchestrator import PipelineOrchestrator
from plan.cli_handler import resolve_components
from plan.config import FAILURE_MESSAGE, SCRIPT_VERSION, SYMBOLS
from plan.config_loader import build_arg_parser, parse_args, resolve_install_plan


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for ocamlbrew.

    Args:
        args: Command-line arguments. If None, sys.argv[1:] is used.

    Returns:
        Exit code: 0 on success, 1 on usage errors, a declined confirmation
        or any failed stage.
    """
    parsed_args = parse_args(args)
    if parsed_args.help:
        build_arg_parser().print_help(sys.stderr)
        return 1

    logger = setup_logging(parsed_args.verbose)

    try:
        plan = resolve_install_plan(parsed_args, current_logger=logger)
    except ValueError as e:
        build_arg_parser().print_usage(sys.stderr)
        print(f"ocamlbrew: error: {e}", file=sys.stderr)
        return 1

    channel = LogChannel(plan.log_file)
    try:
        channel.open()
    except OSError as e:
        print(f"ocamlbrew: error: cannot open log file {plan.log_file}: {e}", file=sys.stderr)
        return 1

    try:
        channel.say(
            f"{SYMBOLS['rocket']} ocamlbrew {SCRIPT_VERSION}: building {plan.source_description}"
        )
        final_plan = resolve_components(plan, channel, logger)
        if final_plan is None:
            print("Installation cancelled.", file=sys.stderr)
            return 1
        return PipelineOrchestrator(final_plan, channel, logger).run()
    except Exception:
        logging.getLogger("ocamlbrew").exception("Unexpected error during installation")
        channel.fail(FAILURE_MESSAGE.format(log_file=plan.log_file))
        return 1
    finally:
        channel.restore()


if __name__ == "__main__":
    sys.exit(main())
