"""Listing the game's remote files and finding leftovers."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path

import requests

from launcher_core import repairer
from launcher_core.installer.downloader import DEFAULT_REQUESTS_TIMEOUT
from launcher_core.repairer import IntegrityFile
from launcher_core.star_rail.api import request

_INDEX_NAME = "pkg_version"
_SKIP_NAMES = ("webCaches", "SDKCaches", "GeneratedSoundBanks", "ScreenShot")


def _entry(value: object, base_url: str) -> IntegrityFile:
    if not isinstance(value, dict):
        raise ValueError(f"integrity entry must be an object: {value!r}")
    name = value.get("remoteName")
    md5 = value.get("md5")
    size = value.get("fileSize")
    if not isinstance(name, str) or not isinstance(md5, str):
        raise ValueError(f"integrity entry lacks remoteName or md5: {value!r}")
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        raise ValueError(f"integrity entry has no valid fileSize: {value!r}")
    return IntegrityFile(path=Path(name), md5=md5, size=size, base_url=base_url)


def parse_integrity_lines(text: str, base_url: str) -> list[IntegrityFile]:
    """Parse a package index with one JSON object per line; other lines are ignored."""
    files = []
    for line in text.split("\n"):
        try:
            value = json.loads(line.removesuffix("\r"))
        except ValueError:
            continue
        files.append(_entry(value, base_url))
    return files


@lru_cache(maxsize=None)
def _fetch_integrity_files(api_uri: str, timeout: float | None) -> tuple[IntegrityFile, ...]:
    base_url = request(api_uri).data.game.latest.decompressed_path
    response = requests.get(
        f"{base_url}/{_INDEX_NAME}",
        timeout=DEFAULT_REQUESTS_TIMEOUT if timeout is None else timeout,
    )
    text = response.content.decode("utf-8", errors="replace")
    return tuple(parse_integrity_lines(text, base_url))


def get_integrity_files(api_uri: str, timeout: float | None = None) -> list[IntegrityFile]:
    """List the latest game files; successful results are cached."""
    return list(_fetch_integrity_files(api_uri, timeout))


def get_integrity_file(
    api_uri: str, relative_path: str | os.PathLike, timeout: float | None = None
) -> IntegrityFile | None:
    """Find one file by its path relative to the game folder; None if unavailable."""
    relative_path = Path(relative_path)
    try:
        files = get_integrity_files(api_uri, timeout)
    except (requests.RequestException, ValueError):
        return None
    return next((file for file in files if file.path == relative_path), None)


def get_unused_files(
    game_dir: str | os.PathLike, api_uri: str, timeout: float | None = None
) -> list[Path]:
    """Files in the game folder that the latest game no longer lists.

    The game creates files of its own too, so let a user decide what to do with these.
    """
    used = [file.path for file in get_integrity_files(api_uri, timeout)]
    return repairer.get_unused_files(game_dir, used, _SKIP_NAMES)