# common/command_utils.py
# -*- coding: utf-8 -*-
"""
Utilities for executing external commands and logging their progress.

Command output is not captured: children inherit the process descriptors,
which LogChannel points at the log file for the duration of the run.
"""

import logging
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from plan.config import SYMBOLS

module_logger = logging.getLogger(__name__)


def log_message(
    message: str,
    level: str = "info",
    current_logger: Optional[logging.Logger] = None,
    exc_info: bool = False,
) -> None:
    """
    Log a message at the named level.

    Args:
        message (str): The log message to be recorded.
        level (str): One of "debug", "info", "success", "warning", "error",
            "critical". Anything unrecognised is logged at info.
        current_logger (Optional[logging.Logger]): A logger instance to use. If not
            provided, the module-level logger is used.
        exc_info (bool): Whether to attach exception information.
    """
    effective_logger = current_logger if current_logger else module_logger

    if level == "warning":
        effective_logger.warning(message, exc_info=exc_info)
    elif level == "error":
        effective_logger.error(message, exc_info=exc_info)
    elif level == "critical":
        effective_logger.critical(message, exc_info=exc_info)
    elif level == "debug":
        effective_logger.debug(message, exc_info=exc_info)
    else:
        effective_logger.info(message, exc_info=exc_info)


def format_command(command: Sequence[Union[str, Path]]) -> str:
    return subprocess.list2cmdline([str(part) for part in command])


def run_command(
    command: Sequence[Union[str, Path]],
    cwd: Optional[Union[str, Path]] = None,
    env: Optional[Dict[str, str]] = None,
    check: bool = True,
    current_logger: Optional[logging.Logger] = None,
) -> subprocess.CompletedProcess:
    """
    Execute an external command and log what was run and how it ended.

    Args:
        command: The command and its arguments. Always run without a shell.
        cwd: Working directory for the command. The process working directory
            is never changed.
        env: Environment for the command. Inherited when None.
        check: Whether to raise CalledProcessError on a non-zero exit status.
        current_logger: A logger to use instead of the module logger.

    Returns:
        subprocess.CompletedProcess: The completed process.

    Raises:
        subprocess.CalledProcessError: If check is True and the command fails.
        FileNotFoundError: If the executable cannot be found.
    """
    effective_logger = current_logger if current_logger else module_logger
    command_to_run: List[str] = [str(part) for part in command]
    command_to_log_str = format_command(command_to_run)

    log_message(
        f"{SYMBOLS['gear']} Executing: {command_to_log_str} {f'(in {cwd})' if cwd else ''}".rstrip(),
        "info",
        effective_logger,
    )
    try:
        result = subprocess.run(
            command_to_run,
            check=check,
            cwd=str(cwd) if cwd else None,
            env=env,
        )
    except subprocess.CalledProcessError as e:
        log_message(
            f"{SYMBOLS['error']} Command `{command_to_log_str}` failed (rc {e.returncode}).",
            "error",
            effective_logger,
        )
        raise
    except FileNotFoundError as e:
        log_message(
            f"{SYMBOLS['error']} Command not found: {e.filename}. Ensure it's installed and in PATH.",
            "error",
            effective_logger,
        )
        raise

    if result.returncode != 0:
        log_message(
            f"{SYMBOLS['warning']} Command `{command_to_log_str}` exited with rc {result.returncode}.",
            "warning",
            effective_logger,
        )
    return result
