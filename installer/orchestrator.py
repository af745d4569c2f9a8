"""
Pipeline executor for ocamlbrew.

This module provides the PipelineOrchestrator class, which runs the
toolchain and every selected component through their stages in the fixed
dependency order, stopping the whole run at the first failed stage.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import installer.components  # noqa: F401  (registers the drivers)
from common.logging_config import LogChannel
from installer.base_component import BaseComponent, ComponentOutcome, StageResult
from installer.registry import InstallerRegistry
from plan.config import FAILURE_MESSAGE, PIPELINE_ORDER, SYMBOLS, TOOLCHAIN
from plan.config_models import InstallPlan


class PipelineOrchestrator:
    """
    Runs the component pipeline for one InstallPlan.

    The toolchain always runs; findlib, OPAM and the auxiliary tools run when
    selected in the plan. There is no retry and no partial success: the first
    failed stage restores the terminal, points the user at the log file and
    ends the run with exit status 1.
    """

    def __init__(
        self,
        plan: InstallPlan,
        channel: LogChannel,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            plan: The resolved install plan.
            channel: The open log channel; restored by this orchestrator.
            logger: Optional logger instance. If not provided, a new logger will be created.
        """
        self.plan = plan
        self.channel = channel
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.outcomes: Dict[str, ComponentOutcome] = {}

    def is_selected(self, name: str) -> bool:
        return name == TOOLCHAIN or self.plan.components.is_selected(name)

    def selected_components(self) -> List[str]:
        """Component names that will run, in pipeline order."""
        return [name for name in PIPELINE_ORDER if self.is_selected(name)]

    def create_driver(self, name: str) -> BaseComponent:
        return InstallerRegistry.get_installer(name).create(name, self.plan)

    def run(self) -> int:
        """
        Execute the pipeline.

        Returns:
            0 when every selected component was installed, 1 otherwise.
        """
        self.logger.info(
            f"Installing components in order: {', '.join(self.selected_components())}"
        )
        for name in PIPELINE_ORDER:
            if not self.is_selected(name):
                self.outcomes[name] = ComponentOutcome.SKIPPED
                continue

            driver = self.create_driver(name)
            self.channel.say(
                f"{SYMBOLS['step']} Installing {driver.get_description()}..."
            )
            result = self.run_driver(driver)
            if not result.ok:
                self.outcomes[name] = ComponentOutcome.FAILED
                self.logger.error(
                    f"{SYMBOLS['critical']} {name} failed during {result.stage.value}: {result.error}"
                )
                self.channel.fail(FAILURE_MESSAGE.format(log_file=self.plan.log_file))
                return 1

            self.outcomes[name] = ComponentOutcome.SUCCEEDED

        self.finish()
        return 0

    def run_driver(self, driver: BaseComponent) -> StageResult:
        """Run the driver's stages in order, threading the source tree through."""
        source_root: Optional[Path] = None
        result: Optional[StageResult] = None
        for stage in driver.stages:
            result = driver.run_stage(stage, source_root)
            if not result.ok:
                return result
            source_root = result.source_root
        return result

    def finish(self) -> None:
        self.channel.say(f"{SYMBOLS['sparkles']} All done!")
        self.channel.say(f"{self.plan.source_description} and friends are installed in {self.plan.install_dir}")
        self.channel.say(
            f"Add 'source {self.plan.rc_file}' to your shell start-up file to use them."
        )
        self.channel.say(f"The build log is kept in {self.plan.log_file}")
        self.channel.restore()
