"""Terminal rendering of board cells and pieces in several display styles."""

from __future__ import annotations

import enum
import logging
import os
import re
import struct
import sys
import time
from pathlib import Path
from typing import Callable, Optional, Union

__all__ = [
    "RENDER_CONFIG_FILE",
    "RenderMode",
    "Renderer",
    "block_char",
    "emoji_for_block",
    "save_render_settings",
    "load_render_settings",
    "render_preference_menu",
    "choose_render_mode",
    "init_render_mode",
]

log = logging.getLogger(__name__)

RENDER_CONFIG_FILE = "tetris_config.dat"

PathLike = Union[str, "os.PathLike[str]"]

_SETTING = struct.Struct("<i")
_CLEAR = "\033[H\033[J"
_INVALID_PAUSE = 2.0


class RenderMode(enum.IntEnum):
    """How a board cell is drawn."""

    UNICODE_BLOCK_ELEMENTS = 0
    BACKGROUND_COLOR = 1
    EMOJI = 2
    PLATFORM_COLOR_CODES = 3
    ASCII_ONLY = 4


# Colour ids: 0-6 match the piece types, then the wall and the default colour.
_WALL = 7
_DEFAULT = 8

_FOREGROUND = {
    0: "\033[96m",  # bright cyan
    1: "\033[95m",  # bright magenta
    2: "\033[92m",  # bright green
    3: "\033[91m",  # bright red
    4: "\033[33m",  # dark yellow, standing in for orange
    5: "\033[94m",  # bright blue
    6: "\033[93m",  # bright yellow
    _WALL: "\033[37m",
    _DEFAULT: "\033[0m",
}

_BACKGROUND = {
    0: "\033[106m",
    1: "\033[105m",
    2: "\033[102m",
    3: "\033[101m",
    4: "\033[43m",
    5: "\033[104m",
    6: "\033[103m",
    _WALL: "\033[47m",
    _DEFAULT: "\033[49m",
}

_LETTERS = "ITSZLJO"
_EMOJI = ("🟫", "🟪", "🟩", "🟥", "🟧", "🟦", "🟨")
_WALL_EMOJI = "⬛"

_WALL_CONTENT = {
    RenderMode.UNICODE_BLOCK_ELEMENTS: "■ ",
    RenderMode.BACKGROUND_COLOR: "  ",
    RenderMode.EMOJI: _WALL_EMOJI,
    RenderMode.PLATFORM_COLOR_CODES: "##",
    RenderMode.ASCII_ONLY: "##",
}

_RESETTING_MODES = frozenset(
    {
        RenderMode.UNICODE_BLOCK_ELEMENTS,
        RenderMode.PLATFORM_COLOR_CODES,
        RenderMode.BACKGROUND_COLOR,
    }
)


def block_char(block_type: int) -> str:
    """The letter naming a piece type, or a space for anything else."""
    if 0 <= block_type < len(_LETTERS):
        return _LETTERS[block_type]
    return " "


def emoji_for_block(block_type: int) -> str:
    """The emoji drawn for a piece type, or two spaces for anything else."""
    if 0 <= block_type < len(_EMOJI):
        return _EMOJI[block_type]
    return "  "


def _color_id(value: int, is_cell: bool) -> int:
    if is_cell:
        if value == 0:
            return _DEFAULT
        if value == 1:
            return _WALL
        value -= 2
    if value == -1:
        return _WALL
    if 0 <= value <= 6:
        return value
    return _DEFAULT


class Renderer:
    """Produces the text for board segments in one display style."""

    def __init__(self, mode: RenderMode = RenderMode.UNICODE_BLOCK_ELEMENTS) -> None:
        self.mode = RenderMode(mode)

    def _foreground(self, color: int) -> str:
        if self.mode is RenderMode.ASCII_ONLY and color not in (_DEFAULT, _WALL):
            return ""
        if self.mode is RenderMode.EMOJI and color != _DEFAULT:
            return ""
        if self.mode is RenderMode.BACKGROUND_COLOR and color != _DEFAULT:
            return ""
        return _FOREGROUND[color]

    def _color(self, color: int) -> str:
        if self.mode is RenderMode.BACKGROUND_COLOR:
            return _BACKGROUND[color]
        return self._foreground(color)

    def color_for_cell(self, cell_value: int) -> str:
        """Escape sequence that colours a board cell value (0 empty, 1 wall, 2+ piece)."""
        return self._color(_color_id(cell_value, True))

    def color_for_block(self, block_type: int) -> str:
        """Escape sequence that colours a piece type (-1 stands for the wall)."""
        return self._color(_color_id(block_type, False))

    def reset(self) -> str:
        """Escape sequence that restores the default colours."""
        return self._foreground(_DEFAULT)

    def _content(self, block_type: int) -> str:
        mode = self.mode
        if mode is RenderMode.UNICODE_BLOCK_ELEMENTS:
            return "■ "
        if mode is RenderMode.BACKGROUND_COLOR:
            return "  "
        if mode is RenderMode.EMOJI:
            return _WALL_EMOJI if block_type == -1 else emoji_for_block(block_type)
        if mode is RenderMode.PLATFORM_COLOR_CODES:
            return "##"
        return block_char(block_type) * 2

    def _closing(self) -> str:
        return self.reset() if self.mode in _RESETTING_MODES else ""

    def block_segment(self, cell_value: int) -> str:
        """Text for one occupied board cell, two columns wide."""
        if cell_value == 1:
            content = _WALL_CONTENT[self.mode]
        else:
            content = self._content(cell_value - 2)
        return self.color_for_cell(cell_value) + content + self._closing()

    def preview_segment(self, block_type: int) -> str:
        """Text for one cell of a falling, next or held piece."""
        return self.color_for_block(block_type) + self._content(block_type) + self._closing()

    def empty_segment(self) -> str:
        """Text for one empty board cell."""
        return "  "


def save_render_settings(mode: RenderMode, path: PathLike = RENDER_CONFIG_FILE) -> None:
    """Store the chosen mode; a write failure is only logged."""
    try:
        Path(path).write_bytes(_SETTING.pack(int(mode)))
    except OSError:
        log.warning("Could not save render settings to %s", path)


def load_render_settings(path: PathLike = RENDER_CONFIG_FILE) -> RenderMode:
    """Read the stored mode.

    A missing or short file gives the default mode, and so does any stored
    value outside the first three modes.
    """
    default = RenderMode.UNICODE_BLOCK_ELEMENTS
    try:
        data = Path(path).read_bytes()
    except OSError:
        return default
    if len(data) < _SETTING.size:
        log.warning("Could not read render settings from %s, using default.", path)
        return default
    (value,) = _SETTING.unpack_from(data)
    if not RenderMode.UNICODE_BLOCK_ELEMENTS <= value <= RenderMode.EMOJI:
        log.warning("Invalid render setting %d found in %s, using default.", value, path)
        return default
    return RenderMode(value)


def _sample_line(mode: RenderMode, name: str, block_type: int, sample: str) -> str:
    renderer = Renderer(mode)
    if mode is RenderMode.EMOJI:
        body = sample
    else:
        body = renderer.color_for_block(block_type) + sample + renderer.reset()
    return f"\t\t    {name} Example: {body}\n"


def render_preference_menu() -> str:
    """The text that asks the player to pick a display style."""
    m = RenderMode
    parts = [
        "\n\n\t\t[ Display Configuration ]\n",
        "\t\t=========================================\n",
        "\t\tPlease choose your preferred rendering style:\n\n",
        "\t\t1. Unicode Block Characters with Color (Recommended)\n",
        _sample_line(m.UNICODE_BLOCK_ELEMENTS, "I-Block", 0, "■ "),
        _sample_line(m.UNICODE_BLOCK_ELEMENTS, "Wall", -1, "■ "),
        "\t\t   (Uses ■ character. Looks best on modern terminals.)\n\n",
        "\t\t2. Background Color with Spaces\n",
        _sample_line(m.BACKGROUND_COLOR, "S-Block", 2, "  "),
        _sample_line(m.BACKGROUND_COLOR, "Wall", -1, "  "),
        "\t\t   (Uses '  ' with colored background. Good for minimalist style.)\n\n",
        "\t\t3. Emoji Characters (Experimental)\n",
        _sample_line(m.EMOJI, "Z-Block", 3, emoji_for_block(3)),
        _sample_line(m.EMOJI, "Wall", -1, _WALL_EMOJI),
        "\t\t   (Uses emoji like 🟥, ⬛. Requires good Unicode font support. "
        "Most terminals cannot display full-width emoji correctly.)\n\n",
        "\t\t4. Standard Terminal Colors with '##'\n",
        _sample_line(m.PLATFORM_COLOR_CODES, "T-Block", 1, "##"),
        _sample_line(m.PLATFORM_COLOR_CODES, "Wall", -1, "##"),
        "\t\t   (Uses ## characters. Good if ■ has issues.)\n\n",
        "\t\t5. ASCII Only (Most Compatible)\n",
        _sample_line(m.ASCII_ONLY, "L-Block", 4, "LL"),
        _sample_line(m.ASCII_ONLY, "Wall", -1, "##"),
        "\t\t   (Uses letter pairs like II, TT. No special characters or colors.)\n\n",
        "\t\t=========================================\n",
        "\t\tEnter your choice (1-5): ",
    ]
    return "".join(parts)


_LEADING_INT = re.compile(r"[+-]?\d+")
_CHOICES = {
    1: RenderMode.UNICODE_BLOCK_ELEMENTS,
    2: RenderMode.BACKGROUND_COLOR,
    3: RenderMode.EMOJI,
    4: RenderMode.PLATFORM_COLOR_CODES,
    5: RenderMode.ASCII_ONLY,
}


def choose_render_mode(answer: str) -> RenderMode:
    """Map the player's answer (1-5) to a mode; raise ValueError otherwise."""
    tokens = answer.split()
    number = None
    if tokens:
        match = _LEADING_INT.match(tokens[0][:9])
        if match:
            number = int(match.group())
    try:
        return _CHOICES[number]  # type: ignore[index]
    except KeyError:
        raise ValueError(f"invalid render choice: {answer!r}") from None


def _ask_terminal(menu: str) -> str:
    sys.stdout.write(_CLEAR)
    try:
        return input(menu)
    except EOFError:
        return ""


def init_render_mode(
    path: PathLike = RENDER_CONFIG_FILE,
    ask: Optional[Callable[[str], str]] = None,
) -> RenderMode:
    """Load the stored mode, or ask the player for one and store it."""
    if Path(path).exists():
        return load_render_settings(path)
    answer = (ask or _ask_terminal)(render_preference_menu())
    try:
        mode = choose_render_mode(answer)
    except ValueError:
        print("\n\t\tInvalid choice. Using default (Unicode Block Elements).")
        mode = RenderMode.UNICODE_BLOCK_ELEMENTS
        time.sleep(_INVALID_PAUSE)
    save_render_settings(mode, path)
    return mode