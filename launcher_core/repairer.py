"""Verifying, repairing and finding leftover game files."""

from __future__ import annotations

import hashlib
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from launcher_core.installer.downloader import Downloader


@dataclass(frozen=True)
class IntegrityFile:
    """A game file as listed by the remote package index."""

    path: Path
    md5: str
    size: int
    base_url: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))

    def verify(self, game_path: str | os.PathLike) -> bool:
        """Compare the file's size and, if the sizes match, its MD5 hash."""
        file_path = Path(game_path) / self.path
        try:
            if file_path.stat().st_size != self.size:
                return False
            data = file_path.read_bytes()
        except OSError:
            return False
        return hashlib.md5(data).hexdigest() == self.md5.lower()

    def fast_verify(self, game_path: str | os.PathLike) -> bool:
        """Compare only the file's size; much faster than ``verify``."""
        try:
            return (Path(game_path) / self.path).stat().st_size == self.size
        except OSError:
            return False

    def repair(self, game_path: str | os.PathLike) -> None:
        """Download the file again, replacing whatever is on disk."""
        downloader = Downloader(f"{self.base_url}/{self.path.as_posix()}")
        downloader.continue_downloading = False
        downloader.download(Path(game_path) / self.path)


def _list_files(folder: Path, skip_names: tuple[str, ...]) -> Iterator[Path]:
    with os.scandir(folder) as scanner:
        entries = sorted(scanner, key=lambda entry: entry.name)
    for entry in entries:
        if any(skip in entry.name for skip in skip_names):
            continue
        path = folder / entry.name
        if entry.is_dir(follow_symlinks=False):
            yield from _list_files(path, skip_names)
        else:
            yield path


def get_unused_files(
    game_dir: str | os.PathLike,
    used_files: Iterable[str | os.PathLike],
    skip_names: Iterable[str] = (),
) -> list[Path]:
    """Files under ``game_dir`` that are not listed in ``used_files``.

    ``used_files`` may hold paths that are absolute or relative to ``game_dir``.
    Entries whose name contains any of ``skip_names`` are not looked into.
    """
    game_dir = Path(game_dir)
    used = {Path(path) for path in used_files}
    skips = tuple(skip_names)
    return [
        path
        for path in _list_files(game_dir, skips)
        if path not in used and path.relative_to(game_dir) not in used
    ]