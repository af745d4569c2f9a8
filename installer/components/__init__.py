"""
Component drivers for ocamlbrew.

Importing this package registers every driver with the InstallerRegistry.
"""

from installer.components.findlib import findlib_installer  # noqa: F401
from installer.components.ocaml import ocaml_installer  # noqa: F401
from installer.components.opam import opam_installer  # noqa: F401
from installer.components.opam_package import opam_package_installer  # noqa: F401
