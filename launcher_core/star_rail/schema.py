"""Typed view of the launcher API response."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_U16_MAX = 0xFFFF


def _require(data: Any, key: str, where: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"{where} must be an object")
    if key not in data:
        raise ValueError(f"missing field `{key}` in {where}")
    return data[key]


def _string(data: Any, key: str, where: str) -> str:
    value = _require(data, key, where)
    if not isinstance(value, str):
        raise ValueError(f"field `{key}` in {where} must be a string")
    return value


def _boolean(data: Any, key: str, where: str) -> bool:
    value = _require(data, key, where)
    if not isinstance(value, bool):
        raise ValueError(f"field `{key}` in {where} must be a boolean")
    return value


def _u16(data: Any, key: str, where: str) -> int:
    value = _require(data, key, where)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U16_MAX:
        raise ValueError(f"field `{key}` in {where} must be an integer in 0..{_U16_MAX}")
    return value


def _array(data: Any, key: str, where: str) -> list:
    value = _require(data, key, where)
    if not isinstance(value, list):
        raise ValueError(f"field `{key}` in {where} must be an array")
    return value


@dataclass(frozen=True)
class VoicePack:
    language: str
    name: str
    path: str
    size: str
    md5: str
    package_size: str

    @classmethod
    def _parse(cls, data: Any) -> VoicePack:
        where = "voice pack"
        return cls(
            language=_string(data, "language", where),
            name=_string(data, "name", where),
            path=_string(data, "path", where),
            size=_string(data, "size", where),
            md5=_string(data, "md5", where),
            package_size=_string(data, "package_size", where),
        )


@dataclass(frozen=True)
class Diff:
    name: str
    version: str
    path: str
    size: str
    md5: str
    is_recommended_update: bool
    package_size: str
    voice_packs: tuple[VoicePack, ...]

    @classmethod
    def _parse(cls, data: Any) -> Diff:
        where = "diff"
        return cls(
            name=_string(data, "name", where),
            version=_string(data, "version", where),
            path=_string(data, "path", where),
            size=_string(data, "size", where),
            md5=_string(data, "md5", where),
            is_recommended_update=_boolean(data, "is_recommended_update", where),
            package_size=_string(data, "package_size", where),
            voice_packs=tuple(VoicePack._parse(item) for item in _array(data, "voice_packs", where)),
        )


@dataclass(frozen=True)
class Latest:
    name: str
    version: str
    path: str
    size: str
    md5: str
    entry: str
    package_size: str
    decompressed_path: str
    voice_packs: tuple[VoicePack, ...]

    @classmethod
    def _parse(cls, data: Any) -> Latest:
        where = "latest"
        return cls(
            name=_string(data, "name", where),
            version=_string(data, "version", where),
            path=_string(data, "path", where),
            size=_string(data, "size", where),
            md5=_string(data, "md5", where),
            entry=_string(data, "entry", where),
            package_size=_string(data, "package_size", where),
            decompressed_path=_string(data, "decompressed_path", where),
            voice_packs=tuple(VoicePack._parse(item) for item in _array(data, "voice_packs", where)),
        )


@dataclass(frozen=True)
class GameInfo:
    latest: Latest
    diffs: tuple[Diff, ...]

    @classmethod
    def _parse(cls, data: Any) -> GameInfo:
        where = "game"
        return cls(
            latest=Latest._parse(_require(data, "latest", where)),
            diffs=tuple(Diff._parse(item) for item in _array(data, "diffs", where)),
        )


@dataclass(frozen=True)
class Data:
    web_url: str
    game: GameInfo
    pre_download_game: GameInfo | None

    @classmethod
    def _parse(cls, data: Any) -> Data:
        where = "data"
        web_url = _string(data, "web_url", where)
        game = GameInfo._parse(_require(data, "game", where))
        pre_download = data.get("pre_download_game")
        return cls(
            web_url=web_url,
            game=game,
            pre_download_game=None if pre_download is None else GameInfo._parse(pre_download),
        )


@dataclass(frozen=True)
class Response:
    retcode: int
    message: str
    data: Data

    @classmethod
    def from_dict(cls, data: Any) -> Response:
        """Build a response from decoded JSON; raise ValueError if it does not fit."""
        where = "response"
        return cls(
            retcode=_u16(data, "retcode", where),
            message=_string(data, "message", where),
            data=Data._parse(_require(data, "data", where)),
        )