# common/file_utils.py
# -*- coding: utf-8 -*-
"""
File system utility functions: unpacking source archives, staging files and
writing the generated shell-sourcing file.
"""

import logging
import shutil
import tarfile
from pathlib import Path
from typing import Iterable, List, Optional, Union

from plan.config import SYMBOLS

from .command_utils import log_message

module_logger = logging.getLogger(__name__)


class ArchiveLayoutError(RuntimeError):
    """The archive does not unpack into a single top-level directory."""


def extract_archive(
    archive_path: Union[str, Path],
    extract_to_dir: Union[str, Path],
    current_logger: Optional[logging.Logger] = None,
) -> Path:
    """
    Unpack a tarball and return the source tree it contains.

    Release tarballs hold exactly one top-level directory (``ocaml-4.14.2/``,
    ``findlib-1.9.6/``...); that directory is returned.

    Raises:
        tarfile.TarError: If the archive cannot be read.
        ArchiveLayoutError: If there is no single top-level directory.
    """
    logger_to_use = current_logger if current_logger else module_logger
    extract_dir = Path(extract_to_dir)
    extract_dir.mkdir(parents=True, exist_ok=True)

    log_message(
        f"{SYMBOLS['gear']} Extracting {archive_path} into {extract_dir}",
        "info",
        logger_to_use,
    )
    with tarfile.open(archive_path, "r:*") as tar:
        top_level = {
            Path(member.name).parts[0]
            for member in tar.getmembers()
            if Path(member.name).parts and Path(member.name).parts[0] not in (".", "..")
        }
        if len(top_level) != 1:
            raise ArchiveLayoutError(
                f"{archive_path} does not contain a single top-level directory"
            )
        if hasattr(tarfile, "data_filter"):
            tar.extractall(extract_dir, filter="data")
        else:
            tar.extractall(extract_dir)

    source_root = extract_dir / top_level.pop()
    if not source_root.is_dir():
        raise ArchiveLayoutError(f"{source_root} is not a directory")
    return source_root


def copy_matching_files(
    source_dir: Path,
    patterns: Iterable[str],
    destination_dir: Path,
    current_logger: Optional[logging.Logger] = None,
) -> List[Path]:
    """Copy the files of source_dir matching any glob pattern; returns the copies."""
    logger_to_use = current_logger if current_logger else module_logger
    destination_dir.mkdir(parents=True, exist_ok=True)
    copied: List[Path] = []
    for pattern in patterns:
        for source_file in sorted(source_dir.glob(pattern)):
            if source_file.is_file():
                target = destination_dir / source_file.name
                shutil.copy2(source_file, target)
                copied.append(target)
    log_message(
        f"Copied {len(copied)} file(s) from {source_dir} to {destination_dir}",
        "debug",
        logger_to_use,
    )
    return copied


def write_shell_lines(
    file_path: Path,
    lines: Iterable[str],
    append: bool = False,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """Write (or append) lines to a shell file meant to be sourced."""
    logger_to_use = current_logger if current_logger else module_logger
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "a" if append else "w", encoding="utf-8") as f:
        for line in lines:
            f.write(f"{line}\n")
    log_message(
        f"{SYMBOLS['success']} {'Updated' if append else 'Wrote'} {file_path}",
        "info",
        logger_to_use,
    )


def remove_file(
    file_path: Union[str, Path],
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """Delete a file if it exists. Returns True if something was removed."""
    logger_to_use = current_logger if current_logger else module_logger
    path = Path(file_path)
    if not path.exists():
        return False
    path.unlink()
    log_message(f"Removed {path}", "debug", logger_to_use)
    return True
