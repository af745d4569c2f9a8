# plan/config_loader.py
# -*- coding: utf-8 -*-
"""
Configuration resolver for ocamlbrew.

Turns defaults, environment variables, an optional YAML file and the
command-line flags into one immutable InstallPlan, applying this order of
precedence:
1. Pydantic Model Defaults
2. Environment Variables (OCAMLBREW_*, loaded by pydantic-settings)
3. YAML Configuration File (path taken from OCAMLBREW_CONFIG)
4. Command-Line Arguments
"""

import argparse
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from common.file_utils import remove_file
from plan.config import (
    FINDLIB_URL_TEMPLATE,
    LOG_FILE_PREFIX,
    OCAML_SVN_TRUNK,
    OCAML_URL_TEMPLATE,
    OPAM_URL_TEMPLATE,
    SYMBOLS,
)
from plan.config_models import (
    VERSION_PATTERN,
    AuxPackages,
    BrewSettings,
    ComponentSelection,
    InstallPlan,
    InstallSet,
    SourceMode,
)

module_logger = logging.getLogger(__name__)

CONFIG_FILE_ENV_VAR = "OCAMLBREW_CONFIG"

# Flags that take the next argv token as their value, whatever it looks like.
VALUE_OPTIONS = ("-b", "-v", "-c", "-p", "-l", "-n", "-s", "-g", "-G")


class BrewArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit status 1."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


class _SourceModeAction(argparse.Action):
    """Records the acquisition mode along with its locator; the last one given wins."""

    def __init__(self, option_strings, dest, mode: SourceMode, **kwargs):
        self.mode = mode
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        namespace.source_mode = self.mode
        setattr(namespace, self.dest, self.const if self.nargs == 0 else values)


def build_arg_parser() -> BrewArgumentParser:
    """Create the single-dash, getopt-style parser."""
    parser = BrewArgumentParser(
        prog="ocamlbrew",
        description="Build and install OCaml, findlib, OPAM and friends from source.",
        add_help=False,
    )
    parser.set_defaults(source_mode=None, install_set=None)

    parser.add_argument("-h", dest="help", action="store_true", help="Show this help and exit")
    parser.add_argument("-b", dest="base", metavar="path", help="Base directory for the installation")
    parser.add_argument("-v", dest="version", metavar="major.minor.patch", help="OCaml version to install")
    parser.add_argument(
        "-c",
        dest="flags",
        metavar='"flags"',
        help="Extra flags for OCaml's configure script ('=' is treated as a space)",
    )
    parser.add_argument("-p", dest="patch", metavar="path", help="Patch to apply to the OCaml sources")
    parser.add_argument("-l", dest="log", metavar="path", help="Log file (a temporary file by default)")
    parser.add_argument("-n", dest="install_name", metavar="name", help="Custom install directory name")

    install_sets = parser.add_argument_group(
        "install sets", "Skip the questions; the last one given wins"
    )
    install_sets.add_argument(
        "-a", dest="install_set", action="store_const", const=InstallSet.ALL,
        help="Install everything",
    )
    install_sets.add_argument(
        "-o", dest="install_set", action="store_const", const=InstallSet.TOOLCHAIN_ONLY,
        help="Install only OCaml",
    )
    install_sets.add_argument(
        "-f", dest="install_set", action="store_const", const=InstallSet.WITH_FINDLIB,
        help="Install only OCaml and findlib",
    )
    install_sets.add_argument(
        "-x", dest="install_set", action="store_const", const=InstallSet.WITH_FINDLIB_OPAM_TOOL,
        help="Install only OCaml, findlib, OPAM and odoc",
    )
    install_sets.add_argument(
        "-r", dest="install_set", action="store_const", const=InstallSet.WITH_OPAM,
        help="Install only OCaml and OPAM",
    )

    sources = parser.add_argument_group("version control sources")
    sources.add_argument(
        "-s", dest="svn_path", metavar="path", action=_SourceModeAction, mode=SourceMode.SVN,
        help="Build from this Subversion repository path",
    )
    sources.add_argument(
        "-t", dest="svn_path", action=_SourceModeAction, mode=SourceMode.SVN,
        nargs=0, const=OCAML_SVN_TRUNK,
        help="Build from Subversion trunk",
    )
    sources.add_argument(
        "-g", dest="git_url", metavar="url", action=_SourceModeAction, mode=SourceMode.GIT,
        help="Build from this Git repository",
    )
    sources.add_argument("-G", dest="git_revision", metavar="rev", help="Git revision to check out (with -g)")

    parser.add_argument("-V", dest="verbose", action="store_true", help="Verbose console logging")
    return parser


def attach_option_values(args: List[str]) -> List[str]:
    """
    Glue each value-taking flag to the token after it, getopt-style.

    ``["-c", "-no-graph"]`` becomes ``["-c=-no-graph"]`` so that a value
    starting with a dash is never mistaken for another option. A flag given
    last, with no value, is left alone for the parser to report.
    """
    attached: List[str] = []
    tokens = iter(args)
    for token in tokens:
        if token in VALUE_OPTIONS:
            value = next(tokens, None)
            if value is not None:
                token = f"{token}={value}"
        attached.append(token)
    return attached


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Command-line arguments. If None, sys.argv[1:] is used.

    Returns:
        Parsed arguments. Unknown options terminate the process with status 1.
    """
    if args is None:
        args = sys.argv[1:]
    return build_arg_parser().parse_args(attach_option_values(list(args)))


def rewrite_configure_flags(raw_flags: Optional[str]) -> List[str]:
    """
    Split a configure flag string into tokens, treating '=' as whitespace.

    ``"prefix=/x optflag=yes"`` becomes ``["prefix", "/x", "optflag", "yes"]``.
    This drops any '=' the build tool might need; it mirrors how flags have
    always been passed.
    """
    if not raw_flags:
        return []
    return raw_flags.replace("=", " ").split()


def generate_log_path() -> Path:
    """Create a unique, empty temporary log file and return its path."""
    fd, path = tempfile.mkstemp(prefix=LOG_FILE_PREFIX, suffix=".log")
    os.close(fd)
    return Path(path)


def _load_yaml_overrides(
    config_file_path: Path, logger_to_use: logging.Logger
) -> Dict[str, Any]:
    if not config_file_path.is_file():
        logger_to_use.warning(
            f"{SYMBOLS['warning']} Configuration file '{config_file_path}' not found. Ignoring."
        )
        return {}
    try:
        with open(config_file_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger_to_use.warning(
            f"{SYMBOLS['warning']} Could not parse YAML config file '{config_file_path}': {e}. Using defaults and environment variables."
        )
        return {}
    except IOError as e:
        logger_to_use.warning(
            f"{SYMBOLS['warning']} Could not read config file '{config_file_path}': {e}. Using defaults and environment variables."
        )
        return {}

    if yaml_data is None:
        return {}
    if not isinstance(yaml_data, dict):
        logger_to_use.warning(
            f"{SYMBOLS['warning']} Config file '{config_file_path}' does not contain a valid YAML dictionary. Ignoring."
        )
        return {}
    logger_to_use.info(f"Loaded configuration from {config_file_path}")
    return {key: value for key, value in yaml_data.items() if value is not None}


def load_brew_settings(
    config_file_path: Optional[Path] = None,
    current_logger: Optional[logging.Logger] = None,
) -> BrewSettings:
    """
    Load raw settings: model defaults, then environment, then the YAML file.

    Args:
        config_file_path: YAML file to read. Defaults to $OCAMLBREW_CONFIG, if set.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        The merged BrewSettings.
    """
    logger_to_use = current_logger if current_logger else module_logger

    # BaseSettings reads OCAMLBREW_* here: Model Defaults < Environment Variables
    settings = BrewSettings()

    if config_file_path is None and os.environ.get(CONFIG_FILE_ENV_VAR):
        config_file_path = Path(os.environ[CONFIG_FILE_ENV_VAR])
    if config_file_path is None:
        return settings

    overrides = _load_yaml_overrides(Path(config_file_path), logger_to_use)
    if not overrides:
        return settings

    values = settings.model_dump()
    values.update(overrides)
    # Explicit init values take priority over the environment.
    return BrewSettings(**values)


def resolve_install_plan(
    cli_args: argparse.Namespace,
    settings: Optional[BrewSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> InstallPlan:
    """
    Apply the command-line flags on top of the settings and build the plan.

    Args:
        cli_args: Parsed arguments from parse_args().
        settings: Pre-loaded settings. Loaded via load_brew_settings() if None.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        The immutable InstallPlan. When no install-set selector was given, all
        component flags are False and install_set is None.

    Raises:
        ValueError: If the version is not of the form major.minor.patch.
    """
    logger_to_use = current_logger if current_logger else module_logger
    if settings is None:
        settings = load_brew_settings(current_logger=logger_to_use)

    major, minor, patch_level = (
        settings.ocaml_major,
        settings.ocaml_minor,
        settings.ocaml_patch,
    )
    archive_url = settings.ocaml_url
    if cli_args.version:
        match = VERSION_PATTERN.match(cli_args.version)
        if not match:
            raise ValueError(
                f"version '{cli_args.version}' is not of the form major.minor.patch"
            )
        major, minor, patch_level = match.groups()
        archive_url = None
    version = f"{major}.{minor}.{patch_level}"
    if archive_url is None:
        archive_url = OCAML_URL_TEMPLATE.format(
            major=major, minor=minor, version=version
        )

    svn_path = settings.svn_path
    git_url = settings.git_url
    if cli_args.source_mode is not None:
        source_mode = cli_args.source_mode
        svn_path = cli_args.svn_path or svn_path
        git_url = cli_args.git_url or git_url
    elif git_url:
        source_mode = SourceMode.GIT
    elif svn_path:
        source_mode = SourceMode.SVN
    else:
        source_mode = SourceMode.ARCHIVE

    git_revision = cli_args.git_revision or settings.git_revision
    if git_revision and source_mode is not SourceMode.GIT:
        logger_to_use.warning(
            f"{SYMBOLS['warning']} Ignoring revision '{git_revision}': only meaningful when building from a Git URL."
        )
        git_revision = None

    base_dir = Path(cli_args.base) if cli_args.base else settings.base
    install_set = cli_args.install_set
    components = (
        ComponentSelection.for_install_set(install_set)
        if install_set is not None
        else ComponentSelection()
    )

    raw_flags = cli_args.flags if cli_args.flags is not None else settings.flags
    patch_file = cli_args.patch or settings.patch
    log_file = cli_args.log or settings.log
    generated_log = None
    if not log_file:
        log_file = generated_log = generate_log_path()

    try:
        install_plan = InstallPlan(
            base_dir=base_dir.expanduser(),
            install_name=cli_args.install_name or settings.install_name,
            source_mode=source_mode,
            version=version,
            archive_url=archive_url,
            svn_root=settings.svn_root,
            svn_path=svn_path if source_mode is SourceMode.SVN else None,
            git_url=git_url if source_mode is SourceMode.GIT else None,
            git_revision=git_revision,
            make=settings.make,
            configure_flags=rewrite_configure_flags(raw_flags),
            patch=Path(patch_file) if patch_file else None,
            log_file=Path(log_file),
            findlib_url=settings.findlib_url
            or FINDLIB_URL_TEMPLATE.format(version=settings.findlib_version),
            opam_url=settings.opam_url
            or OPAM_URL_TEMPLATE.format(version=settings.opam_version),
            opam_root=settings.opam_root,
            opam_init_flags=settings.opam_flags.split(),
            packages=AuxPackages(
                odoc=settings.odoc_package,
                utop=settings.utop_package,
                batteries=settings.batteries_package,
                ocamlscript=settings.ocamlscript_package,
            ),
            install_set=install_set,
            components=components,
        )
    except ValueError:
        if generated_log is not None:
            remove_file(generated_log, current_logger=logger_to_use)
        raise

    logger_to_use.debug(
        f"Resolved install plan: {install_plan.model_dump_json()}"
    )
    return install_plan
