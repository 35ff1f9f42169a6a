"""Small string and integer helpers."""

from __future__ import annotations

from collections.abc import Iterable

_UINT32_MAX = 0xFFFFFFFF


def join(parts: Iterable[str], delimiter: str) -> str:
    """Join non-empty ``parts`` with ``delimiter``."""
    items = list(parts)
    if not items:
        raise ValueError("cannot join an empty sequence")
    return delimiter.join(items)


def split(text: str, delimiter: str) -> list[str]:
    """Split ``text`` on ``delimiter``.

    Empty fields between delimiters are dropped, but the field that follows
    the last delimiter is always kept, even when it is empty.
    """
    if not text:
        return []
    result: list[str] = []
    field: list[str] = []
    for char in text:
        if char == delimiter:
            if field:
                result.append("".join(field))
                field.clear()
        else:
            field.append(char)
    result.append("".join(field))
    return result


def log2(value: int) -> int:
    """Return the index of the highest set bit of a 32-bit value."""
    if value <= 0 or value > _UINT32_MAX:
        raise ValueError(f"log2 needs a non-zero 32-bit value, got {value}")
    return value.bit_length() - 1