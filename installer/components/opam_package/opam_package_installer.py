"""
Auxiliary tool installer module.

Each auxiliary tool is a single ``opam install`` call; there is nothing to
retrieve or build beforehand.
"""

import logging
from pathlib import Path
from typing import Optional

from installer.base_component import BaseComponent, Stage, StageError
from installer.registry import InstallerRegistry
from plan.config import AUX_DESCRIPTIONS, AUX_TOOLS
from plan.config_models import InstallPlan


class OpamPackageInstaller(BaseComponent):
    """Installs one auxiliary tool through OPAM."""

    stages = (Stage.INSTALL,)

    def __init__(
        self,
        plan: InstallPlan,
        tool: str,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(plan, logger)
        self.name = tool
        self.package = plan.packages.for_tool(tool)

    @classmethod
    def create(
        cls,
        name: str,
        plan: InstallPlan,
        logger: Optional[logging.Logger] = None,
    ) -> "OpamPackageInstaller":
        return cls(plan, name, logger)

    def get_description(self) -> str:
        return f"{self.package} ({AUX_DESCRIPTIONS.get(self.name, 'OPAM package')})"

    def retrieve(self) -> Path:
        raise StageError(f"{self.name} is fetched by OPAM, not retrieved")

    def build(self, source_root: Path) -> None:
        raise StageError(f"{self.name} is built by OPAM")

    def install(self, source_root: Optional[Path] = None) -> None:
        self.run(
            [self.plan.bin_dir / "opam", "install", self.package],
            env=self.plan.opam_env(),
        )


for _tool in AUX_TOOLS:
    InstallerRegistry.register_class(_tool, OpamPackageInstaller)
