"""Status, application and reversal of the game's Linux patch."""

from __future__ import annotations

import hashlib
import json
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Any

from launcher_core.star_rail.api import request
from launcher_core.star_rail.consts import GameEdition
from launcher_core.traits import RemoteGitSync
from launcher_core.version import Version

_METADATA_FILE = "version.json"
_TEMP_NAME = ".patch-applying"
_SRBASE_FILE = "StarRailBase.dll"
_PLAYER_FILE = "UnityPlayer.dll"
_SUCCESS_MARK = "Done"


class PatchState(Enum):
    NOT_AVAILABLE = auto()
    """No patch exists for the selected region."""

    OUTDATED = auto()
    """The patch targets an older game version."""

    TESTING = auto()
    """The patch targets the latest game version but is still being tested."""

    AVAILABLE = auto()
    """The patch targets the latest game version and is tested."""


_USABLE = frozenset({PatchState.TESTING, PatchState.AVAILABLE})


@dataclass(frozen=True)
class PatchStatus:
    """State of the patch; ``version`` is the patch's own version.

    ``latest`` is set for ``OUTDATED``; the hashes are set for ``TESTING`` and ``AVAILABLE``.
    """

    state: PatchState
    version: Version | None = None
    latest: Version | None = None
    srbase_hash: str | None = None
    player_hash: str | None = None

    def __post_init__(self) -> None:
        if self.state is PatchState.OUTDATED and (self.version is None or self.latest is None):
            raise ValueError("an outdated patch requires its version and the latest one")
        if self.state in _USABLE and (
            self.version is None or self.srbase_hash is None or self.player_hash is None
        ):
            raise ValueError(f"{self.state.name} patch requires its version and hashes")

    @property
    def usable(self) -> bool:
        return self.state in _USABLE


def _field(data: Any, key: str, kind: type, where: str) -> Any:
    if not isinstance(data, dict) or key not in data:
        raise ValueError(f"missing field `{key}` in {where}")
    value = data[key]
    if not isinstance(value, kind):
        raise ValueError(f"field `{key}` in {where} must be {kind.__name__}")
    return value


def _md5(path: Path) -> str:
    return hashlib.md5(path.read_bytes()).hexdigest()


@dataclass(frozen=True)
class MainPatch:
    """The patch kept in ``folder`` together with its status."""

    folder: Path
    status: PatchStatus

    def __post_init__(self) -> None:
        object.__setattr__(self, "folder", Path(self.folder))

    @classmethod
    def from_folder(
        cls, patch_folder: str | os.PathLike, region: GameEdition, api_uri: str
    ) -> MainPatch:
        """Read the patch status from a patch repository folder."""
        folder = Path(patch_folder)
        if not folder.exists():
            raise FileNotFoundError(f"Given patch folder doesn't exist: {folder}")

        metadata = json.loads((folder / _METADATA_FILE).read_text(encoding="utf-8"))
        if not isinstance(metadata, dict):
            raise ValueError("patch metadata must be an object")
        region_data = metadata.get(region.value)
        if region_data is None:
            return cls(folder, PatchStatus(PatchState.NOT_AVAILABLE))

        where = f"{region.value} patch metadata"
        version_text = _field(region_data, "version", str, where)
        testing = _field(region_data, "testing", bool, where)
        hashes = _field(region_data, "hashes", dict, where)
        srbase_hash = _field(hashes, "srbase", str, "patch hashes")
        player_hash = _field(hashes, "player", str, "patch hashes")

        patch_version = Version.from_str(version_text)
        if patch_version is None:
            raise ValueError(f"invalid patch version: {version_text!r}")
        latest_text = request(api_uri).data.game.latest.version
        latest_version = Version.from_str(latest_text)
        if latest_version is None:
            raise ValueError(f"invalid version in API response: {latest_text!r}")

        if patch_version < latest_version:
            status = PatchStatus(PatchState.OUTDATED, version=patch_version, latest=latest_version)
        else:
            status = PatchStatus(
                PatchState.TESTING if testing else PatchState.AVAILABLE,
                version=patch_version,
                srbase_hash=srbase_hash,
                player_hash=player_hash,
            )
        return cls(folder, status)

    def is_applied(self, game_folder: str | os.PathLike) -> bool:
        """Whether both patched game files differ from their original hashes."""
        if not self.status.usable:
            return False
        game_folder = Path(game_folder)
        return (
            _md5(game_folder / _SRBASE_FILE) != self.status.srbase_hash
            and _md5(game_folder / _PLAYER_FILE) != self.status.player_hash
        )

    def _check_usable(self, outdated_message: str) -> None:
        if self.status.state is PatchState.NOT_AVAILABLE:
            raise RuntimeError("Patch for selected region is not available")
        if self.status.state is PatchState.OUTDATED:
            raise RuntimeError(outdated_message)

    def _run_script(self, script: str, args: list[str], game_folder: str | os.PathLike) -> subprocess.CompletedProcess:
        if not self.folder.exists():
            raise FileNotFoundError(f"Patch folder doesn't exist: {self.folder}")
        temp_dir = Path(tempfile.gettempdir()) / _TEMP_NAME
        if temp_dir.exists():
            shutil.rmtree(temp_dir)
        try:
            shutil.copytree(self.folder, temp_dir)
        except OSError as err:
            raise RuntimeError(f"Failed to copy patch to the temp folder: {err}") from err
        try:
            return subprocess.run(
                ["bash", str(temp_dir / script), *args],
                cwd=Path(game_folder),
                capture_output=True,
                check=False,
            )
        finally:
            shutil.rmtree(temp_dir)

    def apply(self, game_folder: str | os.PathLike, use_root: bool = True) -> None:
        """Run the patch's installer in the game folder."""
        self._check_usable("Patch is outdated and can't be applied")
        args = ["--yes-to-all"] if use_root else ["--yes-to-all", "--no-root"]
        result = self._run_script("install.sh", args, game_folder)
        if _SUCCESS_MARK not in result.stdout.decode("utf-8", errors="replace"):
            stderr = result.stderr.decode("utf-8", errors="replace")
            raise RuntimeError(f"Failed to apply patch: {stderr}")

    def revert(self, game_folder: str | os.PathLike) -> None:
        """Run the patch's uninstaller in the game folder."""
        self._check_usable("Patch can't be reverted because it's outdated")
        result = self._run_script("uninstall.sh", [], game_folder)
        if _SUCCESS_MARK not in result.stdout.decode("utf-8", errors="replace"):
            stderr = result.stderr.decode("utf-8", errors="replace")
            raise RuntimeError(f"Failed to revert patch: {stderr}")


class Patch(RemoteGitSync):
    """A local clone of the patch repository."""

    def __init__(self, folder: str | os.PathLike) -> None:
        self._folder = Path(folder)

    @property
    def folder(self) -> Path:
        return self._folder

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Patch):
            return self._folder == other._folder
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._folder)

    def __repr__(self) -> str:
        return f"Patch({str(self._folder)!r})"

    def main_patch(self, region: GameEdition, api_uri: str) -> MainPatch:
        """Status of the main patch for ``region``."""
        return MainPatch.from_folder(self._folder, region, api_uri)