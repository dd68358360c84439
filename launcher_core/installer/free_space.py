"""Free disk space lookups by path."""

from __future__ import annotations

import os
from pathlib import PurePath

import psutil


def _mount_points() -> list[str]:
    """Mount points, longest first, so the most specific disk matches first."""
    mounts = [partition.mountpoint for partition in psutil.disk_partitions(all=True)]
    return sorted(mounts, key=len, reverse=True)


def _starts_with(path: PurePath, mount: str) -> bool:
    prefix = PurePath(mount).parts
    return path.parts[: len(prefix)] == prefix


def available(path: str | os.PathLike) -> int | None:
    """Free bytes on the disk holding ``path``, or None if no disk prefixes it."""
    target = PurePath(path)
    for mount in _mount_points():
        if _starts_with(target, mount):
            try:
                return psutil.disk_usage(mount).free
            except OSError:
                continue
    return None


def is_same_disk(path1: str | os.PathLike, path2: str | os.PathLike) -> bool:
    """Whether some disk's mount point prefixes both paths."""
    first = PurePath(path1)
    second = PurePath(path2)
    return any(
        _starts_with(first, mount) and _starts_with(second, mount)
        for mount in _mount_points()
    )