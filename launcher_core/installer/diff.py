"""Differences between an installed component and its latest version."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from launcher_core.installer.downloader import Downloader, Progress
from launcher_core.version import Version


class DiffDownloadError(Exception):
    """Base class of failures to download or install a version difference."""


class AlreadyLatestError(DiffDownloadError):
    """The installation is already up to date and needs no update."""

    def __init__(self) -> None:
        super().__init__("Component version is already latest")


class OutdatedError(DiffDownloadError):
    """The installed version is too old to be updated; everything must be downloaded again."""

    def __init__(self) -> None:
        super().__init__("Components version is too outdated and can't be updated")


class PathNotSpecifiedError(DiffDownloadError):
    """The difference does not know where it should be installed."""

    def __init__(self) -> None:
        super().__init__("Path to the component's downloading folder is not specified")


class DiffKind(Enum):
    LATEST = auto()
    """The latest version is installed."""

    PREDOWNLOAD = auto()
    """An update can be downloaded in advance; the installed version still works."""

    DIFF = auto()
    """The component must be updated before it can be used."""

    OUTDATED = auto()
    """The installed version is too old for a difference to exist."""

    NOT_INSTALLED = auto()
    """The component is not installed yet."""


_DOWNLOADABLE = frozenset({DiffKind.PREDOWNLOAD, DiffKind.DIFF, DiffKind.NOT_INSTALLED})


@dataclass(frozen=True)
class VersionDiff:
    """What separates the installed version of a component from the latest one.

    ``url``, the sizes and the paths are only meaningful for the kinds that can be
    downloaded: ``PREDOWNLOAD``, ``DIFF`` and ``NOT_INSTALLED``. ``current`` is None
    only for ``NOT_INSTALLED``.
    """

    kind: DiffKind
    latest: Version
    current: Version | None = None
    url: str | None = None
    download_size: int = 0
    unpacked_size: int = 0
    unpacking_path: Path | None = None
    version_file_path: Path | None = None

    def __post_init__(self) -> None:
        if self.kind is DiffKind.NOT_INSTALLED:
            if self.current is not None:
                raise ValueError("a component that is not installed has no current version")
        elif self.current is None:
            raise ValueError(f"{self.kind.name} difference requires the current version")
        if self.kind in _DOWNLOADABLE and self.url is None:
            raise ValueError(f"{self.kind.name} difference requires a url")
        for name in ("unpacking_path", "version_file_path"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, Path(value))

    @property
    def downloadable(self) -> bool:
        """Whether this difference has something to download."""
        return self.kind in _DOWNLOADABLE

    def size(self) -> tuple[int, int] | None:
        """The ``(download_size, unpacked_size)`` pair, or None if nothing can be downloaded."""
        if not self.downloadable:
            return None
        return self.download_size, self.unpacked_size

    def file_name(self) -> str | None:
        """Name of the file to download taken from the URL; None if nothing can be downloaded."""
        if not self.downloadable:
            return None
        position = self.url.rfind("/")
        if position == -1:
            return "index.html"
        return self.url[position + 1:] or "index.html"

    def _download_url(self) -> str:
        if self.kind is DiffKind.LATEST:
            raise AlreadyLatestError()
        if self.kind is DiffKind.OUTDATED:
            raise OutdatedError()
        return self.url

    def download_in(self, folder: str | os.PathLike, progress: Progress | None = None) -> None:
        """Download the difference's archive into ``folder`` under its own file name.

        Failures of the download itself raise ``DownloadingError``.
        """
        downloader = Downloader(self._download_url())
        downloader.download(Path(folder) / downloader.filename(), progress)

    def download_to(self, path: str | os.PathLike, progress: Progress | None = None) -> None:
        """Download the difference's archive to ``path``, file name included.

        Failures of the download itself raise ``DownloadingError``.
        """
        downloader = Downloader(self._download_url())
        downloader.download(Path(path), progress)