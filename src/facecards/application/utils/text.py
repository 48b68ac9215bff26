"""Name normalization helpers."""

from collections.abc import Callable
from typing import Literal

ShortNameStyle = Literal["double_given", "drop_surname", "first_token"]

# ---------- Short names ----------


def _double_given(parts: list[str]) -> list[str]:
    # "Mary Jo Smith" -> "Mary Jo", "Ada Lovelace" -> "Ada"
    if len(parts) == 3:
        return parts[:2]
    return parts[:1]


def _drop_surname(parts: list[str]) -> list[str]:
    return parts[:-1]


def _first_token(parts: list[str]) -> list[str]:
    return parts[:1]


_STYLES: dict[str, Callable[[list[str]], list[str]]] = {
    "double_given": _double_given,
    "drop_surname": _drop_surname,
    "first_token": _first_token,
}


def short_name(full_name: str, style: ShortNameStyle = "double_given") -> str:
    """
    Project a display name onto the short form shown in the game.

    Single-token names are returned unchanged. Two people whose short names
    collide are never offered in the same round, so the projection decides
    which namesakes can appear together.
    """
    parts = full_name.strip().split()
    if len(parts) <= 1:
        return full_name
    return " ".join(_STYLES[style](parts))


def short_name_function(style: ShortNameStyle = "double_given") -> Callable[[str], str]:
    """Bind a style, for callers that take a plain ``name -> short name`` function."""
    if style not in _STYLES:
        raise ValueError(f"Unknown short name style: {style!r}")

    def project(full_name: str) -> str:
        return short_name(full_name, style)

    return project
