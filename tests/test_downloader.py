from pathlib import Path
from types import SimpleNamespace
from unittest import mock

import pytest
import requests
import responses

from launcher_core.installer.downloader import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_REQUESTS_TIMEOUT,
    Downloader,
    NoSpaceAvailableError,
    OutputFileError,
    PathNotMountedError,
    RequestError,
)

URL = "https://example.com/files/data.bin"
BODY = b"0123456789"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def _head(rsps, length=len(BODY), **extra):
    headers = {"Content-Length": str(length)}
    headers.update(extra)
    rsps.add(responses.HEAD, URL, headers=headers)


def test_length_from_head(mocked):
    _head(mocked)
    downloader = Downloader(URL)
    assert downloader.length() == len(BODY)
    assert downloader.chunk_size == DEFAULT_CHUNK_SIZE
    assert downloader.timeout == DEFAULT_REQUESTS_TIMEOUT
    assert downloader.continue_downloading is True


def test_length_is_none_when_head_fails(mocked):
    downloader = Downloader(URL)
    assert downloader.length() is None


def test_non_numeric_length_is_rejected(mocked):
    mocked.add(responses.HEAD, URL, headers={"Content-Length": "many"})
    with pytest.raises(ValueError):
        Downloader(URL)


@pytest.mark.parametrize(
    ("uri", "expected"),
    [
        ("https://example.com/example.zip", "example.zip"),
        ("https://example.com/", "index.html"),
        ("https://example.com/dir\\archive.7z", "archive.7z"),
        ("nothing", "index.html"),
    ],
)
def test_filename(mocked, uri, expected):
    assert Downloader(uri).filename() == expected


def test_download_writes_body(mocked, tmp_path):
    _head(mocked)
    mocked.add(responses.GET, URL, body=BODY)
    calls = []
    target = tmp_path / "nested" / "data.bin"
    Downloader(URL).download(target, lambda current, total: calls.append((current, total)))
    assert target.read_bytes() == BODY
    assert calls[-1] == (len(BODY), len(BODY))


def test_download_reports_each_chunk(mocked, tmp_path):
    _head(mocked)
    mocked.add(responses.GET, URL, body=BODY)
    calls = []
    downloader = Downloader(URL)
    downloader.chunk_size = 4
    downloader.download(tmp_path / "data.bin", lambda current, total: calls.append((current, total)))
    assert calls == [(4, 10), (8, 10), (10, 10)]
    assert (tmp_path / "data.bin").read_bytes() == BODY


def test_download_continues_partial_file(mocked, tmp_path):
    _head(mocked)
    mocked.add(responses.GET, URL, body=BODY[5:])
    target = tmp_path / "data.bin"
    target.write_bytes(BODY[:5])
    calls = []
    Downloader(URL).download(target, lambda current, total: calls.append((current, total)))
    assert target.read_bytes() == BODY
    assert mocked.calls[-1].request.headers["Range"] == "bytes=5-"
    assert calls[-1] == (len(BODY), len(BODY))


def test_download_restarts_when_not_continuing(mocked, tmp_path):
    _head(mocked)
    mocked.add(responses.GET, URL, body=BODY)
    target = tmp_path / "data.bin"
    target.write_bytes(b"stale")
    downloader = Downloader(URL)
    downloader.continue_downloading = False
    downloader.download(target)
    assert target.read_bytes() == BODY
    assert mocked.calls[-1].request.headers["Range"] == "bytes=0-"


def test_download_stops_on_content_range(mocked, tmp_path):
    _head(mocked, **{"Content-Range": "bytes */10"})
    target = tmp_path / "data.bin"
    target.write_bytes(BODY)
    calls = []
    Downloader(URL).download(target, lambda current, total: calls.append((current, total)))
    assert calls == [(len(BODY), len(BODY))]
    assert all(call.request.method == "HEAD" for call in mocked.calls)
    assert target.read_bytes() == BODY


def test_download_stops_on_416(mocked, tmp_path):
    _head(mocked)
    mocked.add(responses.GET, URL, status=416)
    target = tmp_path / "data.bin"
    target.write_bytes(BODY)
    calls = []
    Downloader(URL).download(target, lambda current, total: calls.append((current, total)))
    assert calls == [(len(BODY), len(BODY))]
    assert target.read_bytes() == BODY


def test_download_request_failure(mocked, tmp_path):
    _head(mocked)
    with pytest.raises(RequestError):
        Downloader(URL).download(tmp_path / "data.bin")


def test_download_without_space(mocked, tmp_path):
    _head(mocked)
    downloader = Downloader(URL)
    with mock.patch("psutil.disk_usage", return_value=SimpleNamespace(free=5)):
        with pytest.raises(NoSpaceAvailableError) as info:
            downloader.download(tmp_path / "data.bin")
    assert info.value.required == len(BODY)
    assert info.value.available == 5
    assert not (tmp_path / "data.bin").exists()


def test_download_path_not_mounted(mocked, tmp_path):
    _head(mocked)
    downloader = Downloader(URL)
    with mock.patch("psutil.disk_partitions", return_value=[]):
        with pytest.raises(PathNotMountedError) as info:
            downloader.download(tmp_path / "data.bin")
    assert info.value.path == tmp_path / "data.bin"


def test_output_file_error_when_parent_is_file(mocked, tmp_path):
    _head(mocked)
    blocker = tmp_path / "blocker"
    blocker.write_bytes(b"x")
    with pytest.raises(OutputFileError):
        Downloader(URL).download(blocker / "data.bin")


def test_no_space_message_uses_pretty_sizes():
    error = NoSpaceAvailableError(Path("/games"), 2048, 10)
    assert "requires 2.00 KB" in str(error)
    assert error.path == Path("/games")


def test_request_error_is_raised_from_connection_failure(mocked, tmp_path):
    mocked.add(responses.HEAD, URL, body=requests.ConnectionError("refused"))
    with pytest.raises(RequestError) as info:
        Downloader(URL).download(tmp_path / "data.bin")
    assert "refused" in info.value.message