import re
from typing import Iterable, Set

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_REPEAT_RE = re.compile(r"_+")


def sanitize_name(name: str, fallback: str = "resource") -> str:
    """
    Turn a display name into a block label matching ``[a-z][a-z0-9_]*``.

    Empty input gives an empty string; input with no usable characters gives
    ``fallback``. Labels that would start with a digit get an ``r_`` prefix.
    """
    if not name:
        return ""
    out = _NON_ALNUM_RE.sub("_", str(name).lower())
    out = _REPEAT_RE.sub("_", out).strip("_")
    if not out:
        return fallback
    if out[0].isdigit():
        out = f"r_{out}"
    return out


def hyphenate(name: str) -> str:
    return name.replace("_", "-")


class SuffixSequence:
    """
    Deterministic suffixes for generated default names (``orders-table-001``).

    A fresh sequence is used per synthesis call unless one is injected.
    """

    def __init__(self, start: int = 1, width: int = 3):
        self._next = start
        self._width = width

    def next(self) -> str:
        value = str(self._next).zfill(self._width)
        self._next += 1
        return value


class NameRegistry:
    """Declaration names claimed within one synthesis call."""

    def __init__(self, reserved: Iterable[str] = ()):
        self._taken: Set[str] = set(reserved)

    def claim(self, base: str) -> str:
        if base not in self._taken:
            self._taken.add(base)
            return base
        i = 2
        while f"{base}_{i}" in self._taken:
            i += 1
        name = f"{base}_{i}"
        self._taken.add(name)
        return name

    def __contains__(self, name: str) -> bool:
        return name in self._taken
