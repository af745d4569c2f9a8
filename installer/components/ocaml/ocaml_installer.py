"""
OCaml toolchain installer module.

Retrieves the compiler sources from a release tarball, a Subversion path or
a Git repository, builds them with the configured make, installs them under
the plan's install directory and writes the shell-sourcing file.
"""

from pathlib import Path
from typing import Optional

from common.command_utils import log_message
from common.file_utils import copy_matching_files, write_shell_lines
from installer.base_component import BaseComponent, StageError
from installer.registry import InstallerRegistry
from plan.config import (
    LEGACY_COMPILER_LIBS_DIRS,
    LEGACY_COMPILER_LIBS_PATTERNS,
    SYMBOLS,
    TOOLCHAIN,
)
from plan.config_models import SourceMode


def _checkout_dir_name(prefix: str, locator: str) -> str:
    return f"{prefix}-{locator.strip('/').replace('/', '-')}"


@InstallerRegistry.register(
    name=TOOLCHAIN,
    metadata={"description": "OCaml compiler and runtime"},
)
class OcamlInstaller(BaseComponent):
    """
    Installer for the OCaml compiler.

    3.x releases additionally get their compiler interfaces staged under
    ``lib/ocaml/compiler-libs``, where findlib and the toplevel tools expect
    them on newer releases.
    """

    def retrieve(self) -> Path:
        plan = self.plan
        plan.src_dir.mkdir(parents=True, exist_ok=True)

        if plan.source_mode is SourceMode.SVN:
            checkout_dir = plan.src_dir / _checkout_dir_name("ocaml-svn", plan.svn_path)
            repository = f"{plan.svn_root.rstrip('/')}/{plan.svn_path.strip('/')}"
            log_message(
                f"{SYMBOLS['info']} Checking out {repository}",
                "info",
                self.logger,
            )
            self.run(["svn", "checkout", repository, checkout_dir])
            return checkout_dir

        if plan.source_mode is SourceMode.GIT:
            checkout_dir = plan.src_dir / _checkout_dir_name("ocaml-git", plan.vcs_locator)
            log_message(
                f"{SYMBOLS['info']} Cloning {plan.git_url}",
                "info",
                self.logger,
            )
            self.run(["git", "clone", plan.git_url, checkout_dir])
            if plan.git_revision:
                self.run(["git", "checkout", plan.git_revision], cwd=checkout_dir)
            return checkout_dir

        return self.fetch_archive(plan.archive_url)

    def build(self, source_root: Path) -> None:
        if self.plan.patch:
            self.apply_patch(source_root)

        prefix_flag = "-prefix" if self.plan.major < 4 else "--prefix"
        self.run(
            ["./configure", prefix_flag, self.plan.install_dir, *self.plan.configure_flags],
            cwd=source_root,
        )
        if self.plan.major < 5:
            self.make("world.opt", cwd=source_root)
        else:
            self.make(cwd=source_root)

    def apply_patch(self, source_root: Path) -> None:
        """Apply the plan's patch; a relative path is taken from the source tree."""
        patch_path = self.plan.patch
        if not patch_path.is_absolute():
            patch_path = source_root / patch_path
        if not patch_path.is_file():
            raise StageError(f"Patch file {patch_path} not found")
        log_message(
            f"{SYMBOLS['gear']} Applying patch {patch_path}",
            "info",
            self.logger,
        )
        self.run(["patch", "-p0", "-i", patch_path], cwd=source_root)

    def install(self, source_root: Optional[Path]) -> None:
        self.make("install", cwd=source_root)
        if self.plan.major < 4:
            self.stage_compiler_libs(source_root)
        write_shell_lines(
            self.plan.rc_file,
            [f'export PATH="{self.plan.bin_dir}:$PATH"'],
            current_logger=self.logger,
        )

    def stage_compiler_libs(self, source_root: Path) -> None:
        compiler_libs = self.plan.ocaml_lib_dir / "compiler-libs"
        log_message(
            f"{SYMBOLS['info']} Staging compiler interfaces into {compiler_libs}",
            "info",
            self.logger,
        )
        for directory in LEGACY_COMPILER_LIBS_DIRS:
            copy_matching_files(
                source_root / directory,
                LEGACY_COMPILER_LIBS_PATTERNS,
                compiler_libs / directory,
                current_logger=self.logger,
            )
