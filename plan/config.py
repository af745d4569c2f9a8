# plan/config.py
# -*- coding: utf-8 -*-
"""
Centralized static constants and definitions for ocamlbrew.

This module defines truly static values: logging symbols, the fixed
pipeline order, default release locators and the name of the generated
shell-sourcing file.

Mutable runtime configuration (base directory, versions, locators, component
selection) is handled by 'plan/config_models.py' and 'plan/config_loader.py'.
"""

from pathlib import Path

SCRIPT_VERSION: str = "2.0"

BASE_DIR_DEFAULT: Path = Path.home() / "ocamlbrew"

OCAML_MAJOR_DEFAULT: str = "4"
OCAML_MINOR_DEFAULT: str = "14"
OCAML_PATCH_DEFAULT: str = "2"
OCAML_URL_TEMPLATE: str = (
    "https://caml.inria.fr/pub/distrib/ocaml-{major}.{minor}/ocaml-{version}.tar.gz"
)
OCAML_SVN_ROOT_DEFAULT: str = "http://caml.inria.fr/svn/ocaml"
OCAML_SVN_TRUNK: str = "trunk"
# Parent directory (under the base) of every version-control checkout install.
VCS_INSTALL_DIR_NAME: str = "ocaml-svn"

FINDLIB_VERSION_DEFAULT: str = "1.9.6"
FINDLIB_URL_TEMPLATE: str = (
    "http://download.camlcity.org/download/findlib-{version}.tar.gz"
)
OPAM_VERSION_DEFAULT: str = "2.1.6"
OPAM_URL_TEMPLATE: str = (
    "https://github.com/ocaml/opam/releases/download/{version}/opam-full-{version}.tar.gz"
)

MAKE_DEFAULT: str = "make"

RC_FILE_NAME: str = "ocamlbrew.bashrc"
LOG_FILE_PREFIX: str = "ocamlbrew-"

# Component names in the order the pipeline runs them.
TOOLCHAIN: str = "ocaml"
LIBRARY_MANAGER: str = "findlib"
PACKAGE_MANAGER: str = "opam"
AUX_TOOLS: tuple = ("odoc", "utop", "batteries", "ocamlscript")
AUX_DESCRIPTIONS: dict[str, str] = {
    "odoc": "documentation generator",
    "utop": "interactive toplevel",
    "batteries": "utility library",
    "ocamlscript": "scripting helper",
}
PIPELINE_ORDER: tuple = (TOOLCHAIN, LIBRARY_MANAGER, PACKAGE_MANAGER) + AUX_TOOLS

# Compiler interface directories staged into compiler-libs for 3.x releases.
LEGACY_COMPILER_LIBS_DIRS: tuple = ("parsing", "typing", "utils", "toplevel")
LEGACY_COMPILER_LIBS_PATTERNS: tuple = ("*.cmi", "*.cmo", "*.mli")

FAILURE_MESSAGE: str = "Something went wrong, please check the log file: {log_file}"

# --- Symbols for Logging ---
SYMBOLS: dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "step": "➡️",
    "gear": "⚙️",
    "package": "📦",
    "rocket": "🚀",
    "sparkles": "✨",
    "critical": "🔥",
    "debug": "🐛",
}
