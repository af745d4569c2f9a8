"""
findlib installer module.
"""

from pathlib import Path
from typing import Optional

from installer.base_component import ArchiveComponent
from installer.registry import InstallerRegistry
from plan.config import LIBRARY_MANAGER


@InstallerRegistry.register(
    name=LIBRARY_MANAGER,
    metadata={"description": "findlib library manager"},
)
class FindlibInstaller(ArchiveComponent):
    """Builds findlib against the freshly installed compiler."""

    def archive_url(self) -> str:
        return self.plan.findlib_url

    def build(self, source_root: Path) -> None:
        install_dir = self.plan.install_dir
        self.run(
            [
                "./configure",
                "-bindir", install_dir / "bin",
                "-mandir", install_dir / "man",
                "-sitelib", self.plan.ocaml_lib_dir / "site-lib",
                "-config", self.plan.etc_dir / "findlib.conf",
            ],
            cwd=source_root,
        )
        self.make("all", cwd=source_root)
        self.make("opt", cwd=source_root)

    def install(self, source_root: Optional[Path]) -> None:
        self.make("install", cwd=source_root)
