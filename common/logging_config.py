# common/logging_config.py
# -*- coding: utf-8 -*-
"""
Logging configuration and output redirection for ocamlbrew.

Before the plan is resolved, a plain console handler on stderr is enough.
Once the plan is known, LogChannel sends everything the process and its
children write to the log file, while progress notices and prompts keep
reaching the terminal through saved copies of the original descriptors.

Two sinks, two levels:
- informational records marked user-facing go to the terminal and the log;
- every other record goes to the log only;
- prompts are written to the terminal only and never logged.
"""

import logging
import os
import sys
from pathlib import Path
from typing import IO, List, Optional, Union

USER_FACING_ATTR = "user_facing"

LOG_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class UserFacingFilter(logging.Filter):
    """Only lets through records logged with ``extra={"user_facing": True}``."""

    def filter(self, record: logging.LogRecord) -> bool:
        return bool(getattr(record, USER_FACING_ATTR, False))


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Set up console logging for the part of the run before redirection.

    Args:
        verbose: Whether to enable debug output.

    Returns:
        The "ocamlbrew" logger.
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root_logger.addHandler(console_handler)

    return logging.getLogger("ocamlbrew")


class LogChannel:
    """
    Scoped redirection of the process output to a log file.

    ``open()`` duplicates the stdout/stderr descriptors, then points them at
    the log file so that child processes write there too. ``restore()``
    undoes this exactly once. The descriptor numbers and the input stream are
    parameters so the channel can run on something other than the real
    terminal.
    """

    def __init__(
        self,
        log_path: Union[str, Path],
        stdout_fd: int = 1,
        stderr_fd: int = 2,
        stdin: Optional[IO[str]] = None,
        logger_name: str = "ocamlbrew",
    ):
        self.log_path = Path(log_path)
        self.stdout_fd = stdout_fd
        self.stderr_fd = stderr_fd
        self.stdin = stdin
        self.logger = logging.getLogger(logger_name)

        self.terminal: Optional[IO[str]] = None
        self._saved_stderr_fd: Optional[int] = None
        self._log_stream: Optional[IO[str]] = None
        self._log_handler: Optional[logging.Handler] = None
        self._terminal_handler: Optional[logging.Handler] = None
        self._previous_level: Optional[int] = None
        self._previous_handlers: List[logging.Handler] = []
        self._opened = False
        self._restored = False

    @property
    def is_open(self) -> bool:
        return self._opened and not self._restored

    def open(self) -> "LogChannel":
        if self._opened:
            raise RuntimeError("LogChannel can only be opened once")

        # The log must be open before any descriptor is duplicated.
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._log_stream = open(self.log_path, "a", buffering=1, encoding="utf-8")

        _flush_std_streams()
        saved_stdout_fd = os.dup(self.stdout_fd)
        self._saved_stderr_fd = os.dup(self.stderr_fd)
        self.terminal = os.fdopen(saved_stdout_fd, "w", buffering=1, encoding="utf-8")
        os.dup2(self._log_stream.fileno(), self.stdout_fd)
        os.dup2(self._log_stream.fileno(), self.stderr_fd)

        self._log_handler = logging.StreamHandler(self._log_stream)
        self._log_handler.setLevel(logging.DEBUG)
        self._log_handler.setFormatter(logging.Formatter(LOG_FILE_FORMAT))

        self._terminal_handler = logging.StreamHandler(self.terminal)
        self._terminal_handler.setLevel(logging.INFO)
        self._terminal_handler.addFilter(UserFacingFilter())
        self._terminal_handler.setFormatter(logging.Formatter("%(message)s"))

        # The console handler would write into the log a second time.
        root_logger = logging.getLogger()
        self._previous_level = root_logger.level
        self._previous_handlers = root_logger.handlers[:]
        for handler in self._previous_handlers:
            root_logger.removeHandler(handler)
        if root_logger.getEffectiveLevel() > logging.INFO:
            root_logger.setLevel(logging.INFO)
        root_logger.addHandler(self._log_handler)
        root_logger.addHandler(self._terminal_handler)

        self._opened = True
        self.logger.debug(f"Output redirected to {self.log_path}")
        return self

    def restore(self) -> None:
        """Point stdout/stderr back at the terminal. Later calls do nothing."""
        if not self._opened or self._restored:
            return
        self._restored = True

        root_logger = logging.getLogger()
        for handler in (self._log_handler, self._terminal_handler):
            root_logger.removeHandler(handler)
            handler.flush()
        for handler in self._previous_handlers:
            root_logger.addHandler(handler)
        if self._previous_level is not None:
            root_logger.setLevel(self._previous_level)

        _flush_std_streams()
        self.terminal.flush()
        os.dup2(self.terminal.fileno(), self.stdout_fd)
        os.dup2(self._saved_stderr_fd, self.stderr_fd)
        self.terminal.close()
        os.close(self._saved_stderr_fd)
        self._log_stream.close()

    def say(self, message: str) -> None:
        """Progress notice: shown on the terminal and written to the log."""
        if self.is_open:
            self.logger.info(message, extra={USER_FACING_ATTR: True})
        else:
            print(message, file=sys.stderr)

    def prompt(self, message: str) -> str:
        """Ask on the terminal only and read one line of input ('' on EOF)."""
        if self.is_open:
            self.terminal.write(message)
            self.terminal.flush()
        else:
            sys.stderr.write(message)
            sys.stderr.flush()
        stream = self.stdin if self.stdin is not None else sys.stdin
        line = stream.readline()
        return line.rstrip("\n")

    def fail(self, message: str) -> None:
        """Restore the terminal and report a fatal error on it."""
        if self.is_open:
            self.logger.error(message)
        self.restore()
        print(message, file=sys.stderr)

    def __enter__(self) -> "LogChannel":
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.restore()


def _flush_std_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (AttributeError, ValueError):
            pass
