"""Download an archive and unpack it, reporting progress through updates."""

from __future__ import annotations

import math
import os
import tarfile
import tempfile
import threading
import zipfile
from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from launcher_core.installer import free_space
from launcher_core.installer.archives import Archive
from launcher_core.installer.downloader import (
    Downloader,
    DownloadingError,
    NoSpaceAvailableError,
    PathNotMountedError,
)

_POLL_INTERVAL = 0.25
_SAME_DISK_FACTOR = 2.5
_ARCHIVE_ERRORS = (OSError, ValueError, zipfile.BadZipFile, tarfile.TarError)


class UpdateKind(Enum):
    CHECKING_FREE_SPACE = auto()
    DOWNLOADING_STARTED = auto()
    DOWNLOADING_PROGRESS = auto()
    DOWNLOADING_FINISHED = auto()
    DOWNLOADING_ERROR = auto()
    UNPACKING_STARTED = auto()
    UNPACKING_PROGRESS = auto()
    UNPACKING_FINISHED = auto()
    UNPACKING_ERROR = auto()


@dataclass(frozen=True)
class Update:
    """One step of an installation; only the fields relevant to ``kind`` are set."""

    kind: UpdateKind
    path: Path | None = None
    current: int | None = None
    total: int | None = None
    error: DownloadingError | str | None = None


Updater = Callable[[Update], None]


def _space_error(
    target: Path, other: Path, length: int | None, apart_factor: float
) -> DownloadingError | None:
    space = free_space.available(target.absolute())
    if space is None:
        return PathNotMountedError(target)
    if length is None:
        return None
    # Archive and unpacked data may share one disk
    same_disk = free_space.is_same_disk(target.absolute(), other.absolute())
    required = math.ceil(length * (_SAME_DISK_FACTOR if same_disk else apart_factor))
    if space < required:
        return NoSpaceAvailableError(target, required, space)
    return None


class Installer:
    """Downloads an archive into a temp folder and unpacks it."""

    def __init__(self, uri: str, temp_folder: str | os.PathLike | None = None) -> None:
        self.downloader = Downloader(uri)
        self.temp_folder = Path(temp_folder) if temp_folder is not None else Path(tempfile.gettempdir())

    def filename(self) -> str:
        """Name of the downloaded archive taken from the URI."""
        return self.downloader.filename()

    def temp_path(self) -> Path:
        """Where the archive is stored before unpacking."""
        return self.temp_folder / self.filename()

    def install(self, unpack_to: str | os.PathLike, updater: Updater) -> None:
        """Download the archive and unpack it into ``unpack_to``."""
        temp_path = self.temp_path()
        unpack_to = Path(unpack_to)
        length = self.downloader.length()

        updater(Update(UpdateKind.CHECKING_FREE_SPACE, path=temp_path))
        error = _space_error(temp_path, unpack_to, length, 1.0)
        if error is not None:
            updater(Update(UpdateKind.DOWNLOADING_ERROR, error=error))
            return

        updater(Update(UpdateKind.CHECKING_FREE_SPACE, path=unpack_to))
        error = _space_error(unpack_to, temp_path, length, 1.5)
        if error is not None:
            updater(Update(UpdateKind.DOWNLOADING_ERROR, error=error))
            return

        updater(Update(UpdateKind.DOWNLOADING_STARTED, path=temp_path))
        try:
            self.downloader.download(
                temp_path,
                lambda current, total: updater(
                    Update(UpdateKind.DOWNLOADING_PROGRESS, current=current, total=total)
                ),
            )
        except DownloadingError as err:
            updater(Update(UpdateKind.DOWNLOADING_ERROR, error=err))
            return
        updater(Update(UpdateKind.DOWNLOADING_FINISHED))

        try:
            entries = Archive.open(temp_path).entries()
        except _ARCHIVE_ERRORS as err:
            updater(Update(UpdateKind.UNPACKING_ERROR, error=str(err)))
            return

        for entry in entries:
            target = unpack_to / entry.name
            if target.is_dir():
                continue
            try:
                target.chmod(0o666)
            except OSError:
                # Files we cannot chmod (e.g. owned by root) can often still be removed
                with suppress(OSError):
                    target.unlink()

        self._unpack(temp_path, unpack_to, entries, updater)

    @staticmethod
    def _unpack(temp_path: Path, unpack_to: Path, entries: list, updater: Updater) -> None:
        done = threading.Event()

        def extract() -> None:
            try:
                updater(Update(UpdateKind.UNPACKING_STARTED, path=unpack_to))
                try:
                    Archive.open(temp_path).extract(unpack_to)
                except _ARCHIVE_ERRORS as err:
                    updater(Update(UpdateKind.UNPACKING_ERROR, error=str(err)))
                    return
                with suppress(OSError):
                    temp_path.unlink()
                updater(Update(UpdateKind.UNPACKING_FINISHED))
            finally:
                done.set()

        worker = threading.Thread(target=extract, daemon=True)
        worker.start()

        # Progress is estimated by watching entries appear on disk
        total = sum(entry.size.get_size() for entry in entries)
        pending = [(unpack_to / entry.name, entry.size.get_size()) for entry in entries]
        unpacked = 0
        while True:
            finished = done.wait(_POLL_INTERVAL)
            remaining = []
            for path, size in pending:
                if path.exists():
                    unpacked += size
                else:
                    remaining.append((path, size))
            pending = remaining
            updater(Update(UpdateKind.UNPACKING_PROGRESS, current=unpacked, total=total))
            if not pending or finished:
                break

        worker.join()