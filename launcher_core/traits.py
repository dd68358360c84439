"""Shared behaviour for games and git-synced folders."""

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

from launcher_core.version import Version


class GameExt(ABC):
    """A game installed (or to be installed) in a folder."""

    @property
    @abstractmethod
    def path(self) -> Path:
        """Folder of the game installation."""

    def is_installed(self) -> bool:
        return Path(self.path).exists()

    @abstractmethod
    def latest_version(self) -> Version:
        """Latest version available remotely."""

    @abstractmethod
    def version(self) -> Version:
        """Version currently installed."""


class RemoteGitSync(ABC):
    """A local git repository that can be kept in sync with a remote."""

    @property
    @abstractmethod
    def folder(self) -> Path:
        """Folder holding the local repository."""

    def _git(self, *args: str, capture: bool = False, in_folder: bool = True) -> bytes:
        result = subprocess.run(
            ["git", *args],
            cwd=Path(self.folder) if in_folder else None,
            stdout=subprocess.PIPE if capture else subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
        return result.stdout if capture else b""

    def is_sync(self, remotes: Iterable[str]) -> str | None:
        """Return the first remote the folder is synced with, or None."""
        if not Path(self.folder).exists():
            return None
        for remote in remotes:
            if self.is_sync_with(remote):
                return str(remote)
        return None

    def is_sync_with(self, remote: str) -> bool:
        """Whether the local HEAD matches the remote's HEAD."""
        if not Path(self.folder).exists():
            return False
        head = self._git("rev-parse", "HEAD", capture=True)
        self._git("remote", "set-url", "origin", str(remote))
        self._git("fetch", "origin")
        remote_head = self._git("rev-parse", "origin/HEAD", capture=True)
        return head == remote_head

    def sync(self, remote: str) -> list[str]:
        """Fetch the remote and return the subjects of the commits it brought in."""
        if Path(self.folder).exists():
            head = self._git("rev-parse", "HEAD", capture=True).decode("utf-8").rstrip()
            self._git("remote", "set-url", "origin", str(remote))
            self._git("fetch", "origin")
            self._git("reset", "--hard", "origin/HEAD")
            changes = self._git("--no-pager", "log", "--oneline", f"{head}..HEAD", capture=True)
        else:
            self._git("clone", str(remote), str(self.folder), in_folder=False)
            changes = self._git("--no-pager", "log", "--oneline", capture=True)
        return [line[8:] for line in changes.decode("utf-8").rstrip().splitlines()]