"""
OPAM installer module.

Builds OPAM from its release tarball, initialises an OPAM root inside the
installation and records the OPAM environment in the shell-sourcing file.
"""

from pathlib import Path
from typing import Optional

from common.command_utils import log_message
from common.file_utils import write_shell_lines
from installer.base_component import ArchiveComponent
from installer.registry import InstallerRegistry
from plan.config import PACKAGE_MANAGER, SYMBOLS


@InstallerRegistry.register(
    name=PACKAGE_MANAGER,
    metadata={"description": "OPAM package manager"},
)
class OpamInstaller(ArchiveComponent):
    """Installer for OPAM."""

    def archive_url(self) -> str:
        return self.plan.opam_url

    def build(self, source_root: Path) -> None:
        self.run(["./configure", "--prefix", self.plan.install_dir], cwd=source_root)
        self.make("lib-ext", cwd=source_root)
        self.make(cwd=source_root)

    def install(self, source_root: Optional[Path]) -> None:
        self.make("install", cwd=source_root)
        self.initialize_root()

    def initialize_root(self) -> None:
        """Run ``opam init`` once and export the OPAM environment for later shells."""
        opam_root = self.plan.effective_opam_root
        log_message(
            f"{SYMBOLS['gear']} Initialising OPAM root {opam_root}",
            "info",
            self.logger,
        )
        self.run(
            [self.plan.bin_dir / "opam", "init", *self.plan.opam_init_flags],
            env=self.plan.opam_env(),
        )
        write_shell_lines(
            self.plan.rc_file,
            [
                f'export OPAMROOT="{opam_root}"',
                f'eval "$(opam env --root={opam_root})"',
            ],
            append=True,
            current_logger=self.logger,
        )
