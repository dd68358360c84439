"""Resumable HTTP downloads with free-space checks."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

import requests

from launcher_core.installer import free_space
from launcher_core.prettify import prettify_bytes

DEFAULT_REQUESTS_TIMEOUT = 300
"""Default requests timeout in seconds."""

DEFAULT_CHUNK_SIZE = 128 * 1024
"""Default amount of bytes written (and reported) at once by ``Downloader.download``."""

Progress = Callable[[int, int], None]


class DownloadingError(Exception):
    """Base class of all downloading failures."""


class PathNotMountedError(DownloadingError):
    """The downloading path is not on any available disk."""

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)
        super().__init__(f"Path is not mounted: {self.path}")


class NoSpaceAvailableError(DownloadingError):
    """Not enough free space under the downloading path."""

    def __init__(self, path: str | os.PathLike, required: int, available: int) -> None:
        self.path = Path(path)
        self.required = required
        self.available = available
        super().__init__(
            f"No free space available for specified path: {self.path} "
            f"(requires {prettify_bytes(required)}, available {prettify_bytes(available)})"
        )


class OutputFileError(DownloadingError):
    """The output file could not be created, opened or written."""

    def __init__(self, path: str | os.PathLike, message: str) -> None:
        self.path = Path(path)
        self.message = message
        super().__init__(f"Failed to create output file {self.path}: {message}")


class OutputFileMetadataError(DownloadingError):
    """The metadata of an existing output file could not be read."""

    def __init__(self, path: str | os.PathLike, message: str) -> None:
        self.path = Path(path)
        self.message = message
        super().__init__(f"Failed to read metadata of the output file {self.path}: {message}")


class RequestError(DownloadingError):
    """The HTTP request failed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"request error: {message}")


def _notify(progress: Progress | None, current: int, total: int) -> None:
    if progress is not None:
        progress(current, total)


class Downloader:
    """Downloads one URI to a file, resuming a partial download when possible."""

    def __init__(self, uri: str, timeout: float = DEFAULT_REQUESTS_TIMEOUT) -> None:
        self.uri = uri
        self.timeout = timeout
        self.chunk_size = DEFAULT_CHUNK_SIZE
        self.continue_downloading = True
        self._length = self._fetch_length()

    def _fetch_length(self) -> int | None:
        try:
            with requests.head(
                self.uri, timeout=self.timeout, stream=True, allow_redirects=True
            ) as response:
                value = response.headers.get("content-length")
        except requests.RequestException:
            return None
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"Requested site's content-length is not a number: {value!r}") from None

    def length(self) -> int | None:
        """Content length reported by the server, if any."""
        return self._length

    def filename(self) -> str:
        """Name of the downloaded file taken from the URI, or ``index.html``."""
        position = self.uri.replace("\\", "/").rfind("/")
        if position != -1 and position < len(self.uri) - 1:
            return self.uri[position + 1:]
        return "index.html"

    def _send(self, method: str, downloaded: int) -> requests.Response:
        try:
            return requests.request(
                method,
                self.uri,
                headers={"Range": f"bytes={downloaded}-"},
                timeout=self.timeout,
                stream=True,
                allow_redirects=True,
            )
        except requests.RequestException as err:
            raise RequestError(str(err)) from err

    def _open_output(self, path: Path) -> tuple[BinaryIO, int]:
        if path.exists() and self.continue_downloading:
            try:
                file = path.open("r+b")
            except OSError as err:
                raise OutputFileError(path, str(err)) from err
            try:
                size = os.fstat(file.fileno()).st_size
            except OSError as err:
                file.close()
                raise OutputFileMetadataError(path, str(err)) from err
            try:
                file.seek(size)
            except OSError as err:
                file.close()
                raise OutputFileError(path, str(err)) from err
            return file, size
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            return path.open("wb"), 0
        except OSError as err:
            raise OutputFileError(path, str(err)) from err

    @staticmethod
    def _write(file: BinaryIO, path: Path, data: bytes | bytearray) -> None:
        try:
            file.write(data)
        except OSError as err:
            raise OutputFileError(path, str(err)) from err

    def download(self, path: str | os.PathLike, progress: Progress | None = None) -> None:
        """Download the URI into ``path``, calling ``progress(current, total)`` as data arrives."""
        path = Path(path)

        space = free_space.available(path.absolute())
        if space is None:
            raise PathNotMountedError(path)
        if self._length is not None and space < self._length:
            raise NoSpaceAvailableError(path, self._length, space)

        file, downloaded = self._open_output(path)
        with file:
            with self._send("HEAD", downloaded) as head:
                already_complete = "content-range" in head.headers
            if already_complete:
                total = self._length if self._length is not None else downloaded
                _notify(progress, total, total)
                return
            self._receive(file, path, downloaded, progress)

    def _receive(
        self, file: BinaryIO, path: Path, downloaded: int, progress: Progress | None
    ) -> None:
        with self._send("GET", downloaded) as response:
            # 416: the requested range is past the end, so the file is complete
            if response.status_code == 416:
                total = self._length if self._length is not None else downloaded
                _notify(progress, total, total)
                return

            header = response.headers.get("content-length", "")
            expected = int(header) if header.isdigit() else None
            buffer = bytearray()
            try:
                for piece in response.iter_content(chunk_size=self.chunk_size):
                    buffer.extend(piece)
                    if self._length is not None:
                        total = self._length
                    elif expected is not None:
                        total = expected
                    else:
                        total = len(piece)
                    while len(buffer) >= self.chunk_size:
                        self._write(file, path, buffer[: self.chunk_size])
                        del buffer[: self.chunk_size]
                        downloaded += self.chunk_size
                        _notify(progress, downloaded, total)
            except requests.RequestException as err:
                raise RequestError(str(err)) from err

        if buffer:
            self._write(file, path, buffer)
            downloaded += len(buffer)
            _notify(progress, downloaded, downloaded)