# -*- coding: utf-8 -*-
from unittest.mock import MagicMock

import pytest
import requests

from common.network_utils import archive_file_name, download_file


@pytest.fixture
def mock_response():
    response = MagicMock()
    response.__enter__.return_value = response
    response.iter_content.return_value = [b"abc", b"", b"def"]
    return response


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.org/ocaml-4.14.2.tar.gz", "ocaml-4.14.2.tar.gz"),
        ("https://example.org/opam-full-2.1.6.tar.gz?raw=1", "opam-full-2.1.6.tar.gz"),
    ],
)
def test_archive_file_name(url, expected):
    assert archive_file_name(url) == expected


def test_download_file_writes_chunks(mocker, mock_logger, mock_response, tmp_path):
    mock_get = mocker.patch("common.network_utils.requests.get", return_value=mock_response)

    path = download_file("https://example.org/ocaml-4.14.2.tar.gz", tmp_path / "src", mock_logger)

    assert path == tmp_path / "src" / "ocaml-4.14.2.tar.gz"
    assert path.read_bytes() == b"abcdef"
    mock_get.assert_called_once_with(
        "https://example.org/ocaml-4.14.2.tar.gz", stream=True, timeout=120
    )
    mock_response.raise_for_status.assert_called_once()


def test_download_file_http_error(mocker, mock_logger, mock_response, tmp_path):
    mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("404 Not Found")
    mocker.patch("common.network_utils.requests.get", return_value=mock_response)

    with pytest.raises(requests.exceptions.HTTPError):
        download_file("https://example.org/missing.tar.gz", tmp_path, mock_logger)

    assert "HTTP error" in mock_logger.error.call_args.args[0]


def test_download_file_connection_error(mocker, mock_logger, tmp_path):
    mocker.patch(
        "common.network_utils.requests.get",
        side_effect=requests.exceptions.ConnectionError("refused"),
    )

    with pytest.raises(requests.exceptions.ConnectionError):
        download_file("https://example.org/ocaml.tar.gz", tmp_path, mock_logger)
