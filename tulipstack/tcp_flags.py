"""TCP header flags and their compact display."""

from __future__ import annotations

import enum


class Flag(enum.IntFlag):
    """TCP control bits."""

    FIN = 0x01
    SYN = 0x02
    RST = 0x04
    PSH = 0x08
    ACK = 0x10
    URG = 0x20
    ECE = 0x40
    CWR = 0x80
    CTL = 0x3F


_LETTERS = (
    (Flag.FIN, "F"),
    (Flag.SYN, "S"),
    (Flag.RST, "R"),
    (Flag.PSH, "P"),
    (Flag.ACK, "A"),
    (Flag.URG, "U"),
    (Flag.ECE, "E"),
    (Flag.CWR, "C"),
)


def format_flags(flags: int) -> str:
    """Render flags as ``[FSRPAUEC]`` with a dot for each clear bit."""
    marks = "".join(letter if flags & flag else "." for flag, letter in _LETTERS)
    return f"[{marks}]"