"""Game editions (regions) and the currently selected one."""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import Enum

_DATA_FOLDER = "StarRail_Data"
_LOCALE_VARIABLES = ("LC_ALL", "LC_MESSAGES", "LANG")
_DEFAULT_LOCALE = "en_us"


class GameEdition(Enum):
    GLOBAL = "global"
    CHINA = "china"

    @classmethod
    def list(cls) -> list[GameEdition]:
        """All editions."""
        return [cls.GLOBAL, cls.CHINA]

    @classmethod
    def selected(cls) -> GameEdition:
        """The edition currently selected; ``GLOBAL`` unless changed."""
        return _selection[0]

    def select(self) -> None:
        """Make this edition the selected one."""
        _selection[0] = self

    def data_folder(self) -> str:
        """Name of the game data folder; the same for every edition."""
        return _DATA_FOLDER

    @classmethod
    def from_system_lang(cls, env: Mapping[str, str] | None = None) -> GameEdition:
        """Guess the edition from the locale environment variables."""
        env = os.environ if env is None else env
        locale = next(
            (env[name] for name in _LOCALE_VARIABLES if name in env), _DEFAULT_LOCALE
        )
        if len(locale) > 4 and locale[:5].lower() == "zh_cn":
            return cls.CHINA
        return cls.GLOBAL


_selection: list[GameEdition] = [GameEdition.GLOBAL]