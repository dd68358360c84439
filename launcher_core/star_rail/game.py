"""The installed game: its version and the update it needs."""

from __future__ import annotations

import os
from pathlib import Path

from launcher_core.installer.diff import DiffKind, VersionDiff
from launcher_core.star_rail.api import request
from launcher_core.star_rail.consts import GameEdition
from launcher_core.star_rail.schema import Latest
from launcher_core.traits import GameExt
from launcher_core.version import Version

_DATA_FILE = "data.unity3d"
_SKIP = 2000
_TAKE = 10000
_DIGITS = frozenset(b"0123456789")
_SEPARATOR = ord(".")
_TERMINATOR = ord("&")


def parse_version_bytes(data: bytes) -> Version:
    """Find the version in the contents of the game's data file.

    The version is a zero-prefixed ``a.b.c&`` sequence looked for in the
    10000 bytes that follow the first 2000. Raises ValueError if none is found.
    """
    parts = [bytearray(), bytearray(), bytearray()]
    index = 0
    correct = True
    for byte in data[_SKIP:_SKIP + _TAKE]:
        if byte == 0:
            parts = [bytearray(), bytearray(), bytearray()]
            index = 0
            correct = True
        elif byte == _SEPARATOR:
            index += 1
            if index > 2:
                correct = False
        elif byte == _TERMINATOR:
            if correct and all(parts):
                return Version(*(int(part) for part in parts))
            correct = False
        elif correct and byte in _DIGITS:
            parts[index].append(byte)
        else:
            correct = False
    raise ValueError("Version's bytes sequence wasn't found")


def _parse_version(text: str) -> Version:
    version = Version.from_str(text)
    if version is None:
        raise ValueError(f"invalid version in API response: {text!r}")
    return version


class Game(GameExt):
    """A game installation folder checked against the launcher API at ``api_uri``."""

    def __init__(self, path: str | os.PathLike, api_uri: str) -> None:
        self._path = Path(path)
        self.api_uri = api_uri

    @property
    def path(self) -> Path:
        return self._path

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Game):
            return (self._path, self.api_uri) == (other._path, other.api_uri)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self._path, self.api_uri))

    def __repr__(self) -> str:
        return f"Game(path={str(self._path)!r}, api_uri={self.api_uri!r})"

    def latest_version(self) -> Version:
        """Latest game version the API offers."""
        return _parse_version(request(self.api_uri).data.game.latest.version)

    def version(self) -> Version:
        """Version of the installed game, read from its data file."""
        data_file = self._path / GameEdition.selected().data_folder() / _DATA_FILE
        with data_file.open("rb") as file:
            data = file.read(_SKIP + _TAKE)
        return parse_version_bytes(data)

    def _not_installed(self, latest: Latest) -> VersionDiff:
        return VersionDiff(
            kind=DiffKind.NOT_INSTALLED,
            latest=_parse_version(latest.version),
            url=latest.path,
            download_size=int(latest.size),
            unpacked_size=int(latest.package_size),
            unpacking_path=self._path,
        )

    def try_get_diff(self) -> VersionDiff:
        """Work out what separates the installed game from the latest one."""
        response = request(self.api_uri)
        game = response.data.game

        if not self.is_installed():
            return self._not_installed(game.latest)

        try:
            current = self.version()
        except (OSError, ValueError):
            if self._path.exists() and self._path.stat().st_size == 0:
                return self._not_installed(game.latest)
            raise

        if current == game.latest.version:
            predownload = response.data.pre_download_game
            if predownload is not None:
                for diff in predownload.diffs:
                    if current == diff.version:
                        return VersionDiff(
                            kind=DiffKind.PREDOWNLOAD,
                            current=current,
                            latest=_parse_version(predownload.latest.version),
                            url=diff.path,
                            download_size=int(diff.size),
                            unpacked_size=int(diff.package_size),
                            unpacking_path=self._path,
                        )
            return VersionDiff(kind=DiffKind.LATEST, current=current, latest=current)

        latest = _parse_version(game.latest.version)
        for diff in game.diffs:
            if current == diff.version:
                return VersionDiff(
                    kind=DiffKind.DIFF,
                    current=current,
                    latest=latest,
                    url=diff.path,
                    download_size=int(diff.size),
                    unpacked_size=int(diff.package_size),
                    unpacking_path=self._path,
                )
        return VersionDiff(kind=DiffKind.OUTDATED, current=current, latest=latest)