# common/network_utils.py
# -*- coding: utf-8 -*-
"""
Network-related utility functions.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import requests

from plan.config import SYMBOLS

from .command_utils import log_message

module_logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT_SECONDS = 120
DOWNLOAD_CHUNK_SIZE = 8192


def archive_file_name(url: str) -> str:
    """Last path segment of a download URL, without any query string."""
    return url.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]


def download_file(
    url: str,
    download_to_dir: Union[str, Path],
    current_logger: Optional[logging.Logger] = None,
) -> Path:
    """
    Download a URL into a directory, keeping the remote file name.

    Args:
        url: The URL of the file to fetch.
        download_to_dir: The directory the file is saved into. Created if needed.
        current_logger: A logger to use instead of the module logger.

    Returns:
        The path of the downloaded file.

    Raises:
        requests.RequestException: On HTTP, connection or timeout errors.
        OSError: If the file cannot be written.
    """
    logger_to_use = current_logger if current_logger else module_logger
    download_path = Path(download_to_dir) / archive_file_name(url)
    log_message(
        f"{SYMBOLS['package']} Downloading {url} to {download_path}",
        "info",
        logger_to_use,
    )

    download_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with requests.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT_SECONDS) as response:
            response.raise_for_status()
            with open(download_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
    except requests.exceptions.HTTPError as http_err:
        log_message(
            f"{SYMBOLS['error']} HTTP error occurred while downloading {url}: {http_err}",
            "error",
            logger_to_use,
        )
        raise
    except requests.exceptions.ConnectionError as conn_err:
        log_message(
            f"{SYMBOLS['error']} Connection error occurred while downloading {url}: {conn_err}",
            "error",
            logger_to_use,
        )
        raise
    except requests.exceptions.Timeout as timeout_err:
        log_message(
            f"{SYMBOLS['error']} Timeout while downloading {url}: {timeout_err}",
            "error",
            logger_to_use,
        )
        raise

    log_message(
        f"{SYMBOLS['success']} Downloaded {download_path}",
        "info",
        logger_to_use,
    )
    return download_path
