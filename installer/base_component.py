"""
Base component class for all component drivers.

This module provides the base class that every component driver inherits
from. A driver knows how to retrieve, build and install one component from
the resolved InstallPlan. Stage failures are reported as StageResult values
rather than exceptions, so the pipeline executor decides what happens next.
"""

import logging
import subprocess
import tarfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import requests

from common.command_utils import log_message, run_command
from common.file_utils import ArchiveLayoutError, extract_archive
from common.network_utils import download_file
from plan.config import SYMBOLS
from plan.config_models import InstallPlan


class Stage(str, Enum):
    RETRIEVE = "retrieve"
    BUILD = "build"
    INSTALL = "install"


class ComponentOutcome(str, Enum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class StageError(RuntimeError):
    """A stage failed for a reason other than a failing command."""


@dataclass(frozen=True)
class StageResult:
    """Outcome of one stage of one component."""

    component: str
    stage: Stage
    ok: bool
    source_root: Optional[Path] = None
    error: Optional[str] = None


# Exceptions that mean "this stage failed"; anything else is a bug and propagates.
STAGE_FAILURES = (
    subprocess.CalledProcessError,
    OSError,
    requests.RequestException,
    tarfile.TarError,
    ArchiveLayoutError,
    StageError,
)


class BaseComponent(ABC):
    """
    Base class for all component drivers.

    Core components pass through retrieve, build and install in that order;
    the source tree returned by ``retrieve`` is handed to the later stages.
    Drivers with a single stage override ``stages``.
    """

    name: str = ""
    stages: Tuple[Stage, ...] = (Stage.RETRIEVE, Stage.BUILD, Stage.INSTALL)

    # Class-level metadata that can be overridden by subclasses or set by the registry decorator
    metadata: Dict[str, Any] = {
        "description": "",  # Human readable name used in summaries
    }

    def __init__(
        self,
        plan: InstallPlan,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the component driver.

        Args:
            plan: The resolved install plan. Never modified.
            logger: Optional logger instance. If not provided, a new logger will be created.
        """
        self.plan = plan
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @classmethod
    def create(
        cls,
        name: str,
        plan: InstallPlan,
        logger: Optional[logging.Logger] = None,
    ) -> "BaseComponent":
        """Instantiate the driver registered under name."""
        return cls(plan, logger)

    @abstractmethod
    def retrieve(self) -> Path:
        """
        Obtain the sources.

        Returns:
            The root of the unpacked or checked-out source tree.
        """

    @abstractmethod
    def build(self, source_root: Path) -> None:
        """Configure and compile the sources in source_root."""

    @abstractmethod
    def install(self, source_root: Optional[Path]) -> None:
        """Install the built component."""

    def get_description(self) -> str:
        return str(self.metadata.get("description", "")) or self.name

    def run_stage(self, stage: Stage, source_root: Optional[Path] = None) -> StageResult:
        """
        Run one stage and turn its failure into a StageResult.

        Args:
            stage: The stage to run.
            source_root: The tree returned by the retrieve stage, if any.

        Returns:
            A StageResult; for retrieve, source_root holds the new tree.
        """
        log_message(
            f"--- {SYMBOLS['step']} {self.name}: {stage.value} ---",
            "info",
            self.logger,
        )
        try:
            if stage is Stage.RETRIEVE:
                source_root = self.retrieve()
            elif stage is Stage.BUILD:
                self.build(source_root)
            else:
                self.install(source_root)
        except STAGE_FAILURES as e:
            log_message(
                f"{SYMBOLS['error']} {self.name}: {stage.value} failed: {e}",
                "error",
                self.logger,
            )
            return StageResult(self.name, stage, ok=False, source_root=source_root, error=str(e))

        log_message(
            f"{SYMBOLS['success']} {self.name}: {stage.value} completed",
            "info",
            self.logger,
        )
        return StageResult(self.name, stage, ok=True, source_root=source_root)

    def run(
        self,
        command: Sequence[Union[str, Path]],
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> None:
        """Run a command with the toolchain on PATH; a non-zero status raises."""
        run_command(
            command,
            cwd=cwd,
            env=env if env is not None else self.plan.command_env(),
            check=True,
            current_logger=self.logger,
        )

    def make(self, *targets: str, cwd: Path) -> None:
        self.run([self.plan.make, *targets], cwd=cwd)

    def fetch_archive(self, url: str) -> Path:
        """Download a release tarball into the source directory and unpack it."""
        archive = download_file(url, self.plan.src_dir, current_logger=self.logger)
        return extract_archive(archive, self.plan.src_dir, current_logger=self.logger)


class ArchiveComponent(BaseComponent):
    """A component retrieved from a release tarball."""

    @abstractmethod
    def archive_url(self) -> str:
        """Release tarball to download."""

    def retrieve(self) -> Path:
        return self.fetch_archive(self.archive_url())
