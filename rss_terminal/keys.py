"""Translate raw terminal input into key names."""

from __future__ import annotations

from typing import List

ENTER = "enter"
ESC = "esc"
TAB = "tab"
BACKSPACE = "backspace"
CTRL_C = "ctrl+c"
UP = "up"
DOWN = "down"
LEFT = "left"
RIGHT = "right"
HOME = "home"
END = "end"
PGUP = "pgup"
PGDOWN = "pgdown"
ALT_PREFIX = "alt+"

_ESCAPE_SEQUENCES = {
    "[A": UP,
    "[B": DOWN,
    "[C": RIGHT,
    "[D": LEFT,
    "OA": UP,
    "OB": DOWN,
    "OC": RIGHT,
    "OD": LEFT,
    "[H": HOME,
    "[F": END,
    "OH": HOME,
    "OF": END,
    "[1~": HOME,
    "[4~": END,
    "[5~": PGUP,
    "[6~": PGDOWN,
}

_CONTROL_KEYS = {
    "\r": ENTER,
    "\n": ENTER,
    "\t": TAB,
    "\x7f": BACKSPACE,
    "\b": BACKSPACE,
    "\x03": CTRL_C,
}


def decode_keys(data: str) -> List[str]:
    """Split a chunk of terminal input into key names.

    Printable characters map to themselves. A lone escape byte is the
    escape key and an escape followed by a printable character is that
    character with alt held (``alt+q``). An escape followed by a CSI/SS3
    sequence is decoded into the matching navigation key, and unknown
    sequences are dropped.
    """
    keys: List[str] = []
    index = 0
    while index < len(data):
        char = data[index]
        if char == "\x1b":
            sequence, index = _read_sequence(data, index + 1)
            if not sequence:
                following = data[index : index + 1]
                if following and following.isprintable():
                    keys.append(ALT_PREFIX + following)
                    index += 1
                else:
                    keys.append(ESC)
            elif sequence in _ESCAPE_SEQUENCES:
                keys.append(_ESCAPE_SEQUENCES[sequence])
            continue
        index += 1
        if char == "\r" and data[index : index + 1] == "\n":
            index += 1
        if char in _CONTROL_KEYS:
            keys.append(_CONTROL_KEYS[char])
        elif char.isprintable():
            keys.append(char)
    return keys


def _read_sequence(data: str, start: int):
    if start >= len(data) or data[start] not in "[O":
        return "", start
    end = start + 1
    while end < len(data):
        char = data[end]
        end += 1
        if char.isalpha() or char == "~":
            break
    return data[start:end], end
