"""Opening, listing and extracting downloaded archives."""

from __future__ import annotations

import os
import subprocess
import tarfile
import zipfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

_7Z_SEPARATOR = "-------------------"


class UnsupportedArchiveError(ValueError):
    """The archive's file name has no supported extension."""


class ArchiveFormat(Enum):
    ZIP = "zip"
    TAR = "tar"
    TAR_XZ = "tar.xz"
    TAR_GZ = "tar.gz"
    TAR_BZ2 = "tar.bz2"
    SEVEN_Z = "7z"


_SUFFIXES = (
    (".zip", ArchiveFormat.ZIP),
    (".tar.xz", ArchiveFormat.TAR_XZ),
    (".tar.gz", ArchiveFormat.TAR_GZ),
    (".tar.bz2", ArchiveFormat.TAR_BZ2),
    (".7z", ArchiveFormat.SEVEN_Z),
    (".tar", ArchiveFormat.TAR),
)

_TAR_MODES = {
    ArchiveFormat.TAR: "r:",
    ArchiveFormat.TAR_XZ: "r:xz",
    ArchiveFormat.TAR_GZ: "r:gz",
    ArchiveFormat.TAR_BZ2: "r:bz2",
}


@dataclass(frozen=True)
class Size:
    """An entry size; the compressed one is preferred when both are known."""

    compressed: int | None = None
    uncompressed: int | None = None

    def __post_init__(self) -> None:
        if self.compressed is None and self.uncompressed is None:
            raise ValueError("at least one of compressed or uncompressed size is required")

    def get_size(self) -> int:
        return self.compressed if self.compressed is not None else self.uncompressed


@dataclass(frozen=True)
class Entry:
    name: str
    size: Size


def _parse_7z_listing(output: str) -> list[Entry]:
    parts = output.split(_7Z_SEPARATOR)
    body = _7Z_SEPARATOR.join(parts[1:-1])
    entries = []
    for line in body.split("\n"):
        if not line.strip() or line.startswith("-") or line.startswith(" -"):
            continue
        words = [word.strip() for word in line.split("  ") if word.strip()]
        entries.append(Entry(name=words[-1], size=Size(uncompressed=int(words[1]))))
    return entries


@dataclass(frozen=True)
class Archive:
    """An archive on disk together with its detected format."""

    path: Path
    format: ArchiveFormat

    @classmethod
    def open(cls, path: str | os.PathLike) -> Archive:
        """Open an archive, choosing the format by the file name's extension."""
        path = Path(path)
        with path.open("rb"):
            pass
        name = str(path)
        for suffix, archive_format in _SUFFIXES:
            if name.endswith(suffix):
                break
        else:
            raise UnsupportedArchiveError(f"Archive format is not supported: {name}")
        if archive_format is ArchiveFormat.ZIP:
            with zipfile.ZipFile(path):
                pass
        return cls(path, archive_format)

    def entries(self) -> list[Entry]:
        """List the archive's entries with their sizes."""
        if self.format is ArchiveFormat.ZIP:
            with zipfile.ZipFile(self.path) as archive:
                return [
                    Entry(
                        name=info.filename,
                        size=Size(compressed=info.compress_size, uncompressed=info.file_size),
                    )
                    for info in archive.infolist()
                ]
        if self.format is ArchiveFormat.SEVEN_Z:
            result = subprocess.run(
                ["7z", "l", str(self.path)],
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                check=False,
            )
            return _parse_7z_listing(result.stdout.decode("utf-8"))
        with tarfile.open(self.path, _TAR_MODES[self.format]) as archive:
            return [
                Entry(name=member.name, size=Size(compressed=member.size))
                for member in archive
            ]

    def extract(self, folder: str | os.PathLike) -> None:
        """Unpack the whole archive into ``folder``."""
        folder = Path(folder)
        if self.format is ArchiveFormat.ZIP:
            try:
                with zipfile.ZipFile(self.path) as archive:
                    archive.extractall(folder)
            except (zipfile.BadZipFile, OSError, NotImplementedError, RuntimeError):
                subprocess.run(
                    ["unzip", "-q", "-o", str(self.path), "-d", str(folder)],
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    check=False,
                )
        elif self.format is ArchiveFormat.SEVEN_Z:
            subprocess.run(
                ["7z", "x", str(self.path), f"-o{folder}", "-aoa"],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        else:
            options = {"filter": "tar"} if hasattr(tarfile, "tar_filter") else {}
            with tarfile.open(self.path, _TAR_MODES[self.format]) as archive:
                archive.extractall(folder, **options)