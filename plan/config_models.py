# plan/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for the ocamlbrew install plan.

This module defines the raw settings layer (defaults and environment
overrides, loaded through pydantic-settings) and the immutable InstallPlan
that every component driver reads. The plan also carries the per-component
selection and the batch selector that produced it.
"""

import os
import re
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from plan.config import (
    AUX_TOOLS,
    BASE_DIR_DEFAULT,
    FINDLIB_VERSION_DEFAULT,
    MAKE_DEFAULT,
    OCAML_MAJOR_DEFAULT,
    OCAML_MINOR_DEFAULT,
    OCAML_PATCH_DEFAULT,
    OCAML_SVN_ROOT_DEFAULT,
    OPAM_VERSION_DEFAULT,
    RC_FILE_NAME,
    VCS_INSTALL_DIR_NAME,
)

VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


class SourceMode(str, Enum):
    """How the toolchain sources are obtained."""

    ARCHIVE = "archive"
    SVN = "svn"
    GIT = "git"


class InstallSet(str, Enum):
    """Batch selectors that decide the component set without prompting."""

    ALL = "all"
    TOOLCHAIN_ONLY = "toolchain-only"
    WITH_FINDLIB = "findlib"
    WITH_FINDLIB_OPAM_TOOL = "findlib-opam-tool"
    WITH_OPAM = "opam"


class ComponentSelection(BaseModel):
    """Which optional components run after the toolchain."""

    model_config = ConfigDict(frozen=True)

    findlib: bool = False
    opam: bool = False
    odoc: bool = False
    utop: bool = False
    batteries: bool = False
    ocamlscript: bool = False

    @classmethod
    def for_install_set(cls, install_set: "InstallSet") -> "ComponentSelection":
        return cls(**INSTALL_SET_TABLE[install_set])

    def is_selected(self, name: str) -> bool:
        return bool(getattr(self, name, False))

    def selected_tools(self) -> List[str]:
        return [tool for tool in AUX_TOOLS if self.is_selected(tool)]


INSTALL_SET_TABLE: Dict[InstallSet, Dict[str, bool]] = {
    InstallSet.ALL: {
        "findlib": True,
        "opam": True,
        "odoc": True,
        "utop": True,
        "batteries": True,
        "ocamlscript": True,
    },
    InstallSet.TOOLCHAIN_ONLY: {},
    InstallSet.WITH_FINDLIB: {"findlib": True},
    InstallSet.WITH_FINDLIB_OPAM_TOOL: {
        "findlib": True,
        "opam": True,
        "odoc": True,
    },
    InstallSet.WITH_OPAM: {"opam": True},
}


class AuxPackages(BaseModel):
    """OPAM package names installed for each auxiliary tool."""

    model_config = ConfigDict(frozen=True)

    odoc: str = "odoc"
    utop: str = "utop"
    batteries: str = "batteries"
    ocamlscript: str = "ocamlscript"

    def for_tool(self, tool: str) -> str:
        return getattr(self, tool)


class BrewSettings(BaseSettings):
    """
    Raw settings before command-line flags are applied.

    Every field can be overridden by an ``OCAMLBREW_<FIELD>`` environment
    variable, e.g. ``OCAMLBREW_BASE`` or ``OCAMLBREW_OCAML_MAJOR``.
    """

    model_config = SettingsConfigDict(env_prefix="OCAMLBREW_", extra="ignore")

    base: Path = Field(default=BASE_DIR_DEFAULT, description="Base installation directory.")
    install_name: Optional[str] = Field(default=None, description="Custom install subdirectory name.")

    ocaml_major: str = Field(default=OCAML_MAJOR_DEFAULT, description="OCaml major version.")
    ocaml_minor: str = Field(default=OCAML_MINOR_DEFAULT, description="OCaml minor version.")
    ocaml_patch: str = Field(default=OCAML_PATCH_DEFAULT, description="OCaml patch level.")
    ocaml_url: Optional[str] = Field(default=None, description="Release tarball URL; derived from the version if unset.")

    svn_root: str = Field(default=OCAML_SVN_ROOT_DEFAULT, description="Subversion repository root.")
    svn_path: Optional[str] = Field(default=None, description="Repository path checked out in svn mode.")
    git_url: Optional[str] = Field(default=None, description="Git URL cloned in git mode.")
    git_revision: Optional[str] = Field(default=None, description="Revision checked out after cloning.")

    make: str = Field(default=MAKE_DEFAULT, description="Build tool executable.")
    flags: str = Field(default="", description="Extra configure flags ('=' is rewritten to a space).")
    patch: Optional[Path] = Field(default=None, description="Patch applied to the OCaml sources.")
    log: Optional[Path] = Field(default=None, description="Log file path; a temporary file if unset.")

    findlib_version: str = Field(default=FINDLIB_VERSION_DEFAULT, description="findlib release.")
    findlib_url: Optional[str] = Field(default=None, description="findlib tarball URL.")
    opam_version: str = Field(default=OPAM_VERSION_DEFAULT, description="OPAM release.")
    opam_url: Optional[str] = Field(default=None, description="OPAM tarball URL.")
    opam_root: Optional[Path] = Field(default=None, description="OPAMROOT; '<install dir>/opam' if unset.")
    opam_flags: str = Field(default="", description="Extra flags passed to 'opam init'.")

    odoc_package: str = Field(default="odoc", description="OPAM package of the documentation generator.")
    utop_package: str = Field(default="utop", description="OPAM package of the interactive shell.")
    batteries_package: str = Field(default="batteries", description="OPAM package of the utility library.")
    ocamlscript_package: str = Field(default="ocamlscript", description="OPAM package of the scripting helper.")


class InstallPlan(BaseModel):
    """
    The fully resolved, read-only description of one ocamlbrew run.

    Paths, versions, locators and component flags are fixed when the plan is
    built. The interactive planner derives a new plan with
    :meth:`with_components` instead of changing this one.
    """

    model_config = ConfigDict(frozen=True)

    base_dir: Path
    install_name: Optional[str] = None
    source_mode: SourceMode = SourceMode.ARCHIVE
    version: str
    archive_url: str
    svn_root: str = OCAML_SVN_ROOT_DEFAULT
    svn_path: Optional[str] = None
    git_url: Optional[str] = None
    git_revision: Optional[str] = None
    make: str = MAKE_DEFAULT
    configure_flags: List[str] = Field(default_factory=list)
    patch: Optional[Path] = None
    log_file: Path
    findlib_url: str
    opam_url: str
    opam_root: Optional[Path] = None
    opam_init_flags: List[str] = Field(default_factory=list)
    packages: AuxPackages = Field(default_factory=AuxPackages)
    install_set: Optional[InstallSet] = None
    components: ComponentSelection = Field(default_factory=ComponentSelection)

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        if not VERSION_PATTERN.match(value):
            raise ValueError(
                f"version '{value}' is not of the form major.minor.patch"
            )
        return value

    @model_validator(mode="after")
    def _check_locator(self) -> "InstallPlan":
        if self.source_mode is SourceMode.SVN and not self.svn_path:
            raise ValueError("svn mode requires a repository path")
        if self.source_mode is SourceMode.GIT and not self.git_url:
            raise ValueError("git mode requires a repository URL")
        return self

    @property
    def major(self) -> int:
        return int(self.version.split(".")[0])

    @property
    def batch_mode(self) -> bool:
        return self.install_set is not None

    @property
    def vcs_locator(self) -> Optional[str]:
        """Name of the checkout used below ``<base>/ocaml-svn``."""
        if self.source_mode is SourceMode.SVN:
            return self.svn_path
        if self.source_mode is SourceMode.GIT:
            repo_name = self.git_url.rstrip("/").rsplit("/", 1)[-1]
            if repo_name.endswith(".git"):
                repo_name = repo_name[: -len(".git")]
            if self.git_revision:
                return f"{repo_name}-{self.git_revision}"
            return repo_name
        return None

    @property
    def source_description(self) -> str:
        if self.source_mode is SourceMode.SVN:
            return f"OCaml from {self.svn_root.rstrip('/')}/{self.svn_path}"
        if self.source_mode is SourceMode.GIT:
            revision = f" at {self.git_revision}" if self.git_revision else ""
            return f"OCaml from {self.git_url}{revision}"
        return f"OCaml {self.version}"

    @property
    def install_dir(self) -> Path:
        # custom name > version control checkout > release version
        if self.install_name:
            return self.base_dir / self.install_name
        if self.source_mode is not SourceMode.ARCHIVE:
            return self.base_dir / VCS_INSTALL_DIR_NAME / self.vcs_locator
        return self.base_dir / f"ocaml-{self.version}"

    @property
    def src_dir(self) -> Path:
        return self.base_dir / "src"

    @property
    def bin_dir(self) -> Path:
        return self.install_dir / "bin"

    @property
    def etc_dir(self) -> Path:
        return self.install_dir / "etc"

    @property
    def ocaml_lib_dir(self) -> Path:
        return self.install_dir / "lib" / "ocaml"

    @property
    def rc_file(self) -> Path:
        return self.etc_dir / RC_FILE_NAME

    @property
    def effective_opam_root(self) -> Path:
        return self.opam_root or self.install_dir / "opam"

    def command_env(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Process environment with the new toolchain first on PATH."""
        env = dict(os.environ)
        env["PATH"] = os.pathsep.join(
            [str(self.bin_dir), env.get("PATH", "")]
        ).rstrip(os.pathsep)
        if extra:
            env.update(extra)
        return env

    def opam_env(self) -> Dict[str, str]:
        return self.command_env(
            {"OPAMROOT": str(self.effective_opam_root), "OPAMYES": "1"}
        )

    def with_components(self, components: ComponentSelection) -> "InstallPlan":
        return self.model_copy(update={"components": components})
