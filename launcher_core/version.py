"""Three-part game version numbers."""

from __future__ import annotations

import re
from functools import total_ordering

_PART = re.compile(r"\+?[0-9]+")
_MAX_PART = 255


@total_ordering
class Version:
    """A version made of three numbers, each in the range 0..255."""

    __slots__ = ("_parts",)

    def __init__(self, major: int, minor: int, patch: int) -> None:
        parts = (major, minor, patch)
        for part in parts:
            if isinstance(part, bool) or not isinstance(part, int) or not 0 <= part <= _MAX_PART:
                raise ValueError(f"version part must be an integer in 0..{_MAX_PART}: {part!r}")
        self._parts = parts

    @classmethod
    def from_str(cls, text: str) -> Version | None:
        """Parse a string like ``"1.10.2"``; return None if it is not a valid version."""
        parts = text.split(".")
        if len(parts) != 3:
            return None
        numbers = []
        for part in parts:
            if not _PART.fullmatch(part):
                return None
            value = int(part)
            if value > _MAX_PART:
                return None
            numbers.append(value)
        return cls(*numbers)

    @property
    def version(self) -> tuple[int, int, int]:
        return self._parts

    @property
    def major(self) -> int:
        return self._parts[0]

    @property
    def minor(self) -> int:
        return self._parts[1]

    @property
    def patch(self) -> int:
        return self._parts[2]

    def to_plain_string(self) -> str:
        """Return the parts joined without separators, e.g. ``"123"`` for 1.2.3."""
        return "".join(str(part) for part in self._parts)

    def __str__(self) -> str:
        return ".".join(str(part) for part in self._parts)

    def __repr__(self) -> str:
        return f"Version({self})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Version):
            return self._parts == other._parts
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, Version):
            return self._parts < other._parts
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._parts)