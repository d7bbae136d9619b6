import struct
from unittest import mock

import pytest

from textetris.rendering import (
    RenderMode,
    Renderer,
    block_char,
    choose_render_mode,
    emoji_for_block,
    init_render_mode,
    load_render_settings,
    render_preference_menu,
    save_render_settings,
)

RESET = "\033[0m"


def test_block_char_letters():
    assert "".join(block_char(b) for b in range(7)) == "ITSZLJO"
    assert block_char(7) == " "
    assert block_char(-1) == " "


def test_emoji_for_block():
    assert emoji_for_block(2) == "🟩"
    assert emoji_for_block(3) == "🟥"
    assert emoji_for_block(9) == "  "


def test_unicode_block_segment_colored_and_reset():
    assert Renderer(RenderMode.UNICODE_BLOCK_ELEMENTS).block_segment(2) == "\033[96m■ " + RESET


def test_unicode_wall_segment():
    assert Renderer(RenderMode.UNICODE_BLOCK_ELEMENTS).block_segment(1) == "\033[37m■ " + RESET


def test_ascii_segments():
    r = Renderer(RenderMode.ASCII_ONLY)
    assert r.block_segment(2) == "II"
    assert r.preview_segment(5) == "JJ"
    assert r.block_segment(1) == "\033[37m##"


def test_emoji_segments_have_no_color():
    r = Renderer(RenderMode.EMOJI)
    assert r.block_segment(1) == "⬛"
    assert r.block_segment(4) == emoji_for_block(2)
    assert r.preview_segment(-1) == "⬛"


def test_background_segment():
    r = Renderer(RenderMode.BACKGROUND_COLOR)
    assert r.block_segment(4) == "\033[102m  " + RESET
    assert r.color_for_cell(0) == "\033[49m"


def test_platform_preview_segment():
    assert Renderer(RenderMode.PLATFORM_COLOR_CODES).preview_segment(6) == "\033[93m##" + RESET


@pytest.mark.parametrize("mode", list(RenderMode))
def test_reset_and_empty_in_every_mode(mode):
    r = Renderer(mode)
    assert r.reset() == RESET
    assert r.empty_segment() == "  "


def test_color_for_block_matches_cell_offset():
    r = Renderer(RenderMode.UNICODE_BLOCK_ELEMENTS)
    for block in range(7):
        assert r.color_for_block(block) == r.color_for_cell(block + 2)
    assert r.color_for_block(-1) == r.color_for_cell(1)


@pytest.mark.parametrize("mode", [RenderMode.UNICODE_BLOCK_ELEMENTS, RenderMode.BACKGROUND_COLOR, RenderMode.EMOJI])
def test_settings_round_trip(tmp_path, mode):
    path = tmp_path / "cfg.dat"
    save_render_settings(mode, path)
    assert path.read_bytes() == struct.pack("<i", int(mode))
    assert load_render_settings(path) is mode


@pytest.mark.parametrize("mode", [RenderMode.PLATFORM_COLOR_CODES, RenderMode.ASCII_ONLY])
def test_later_modes_load_as_default(tmp_path, mode):
    path = tmp_path / "cfg.dat"
    save_render_settings(mode, path)
    assert load_render_settings(path) is RenderMode.UNICODE_BLOCK_ELEMENTS


def test_missing_and_short_settings_give_default(tmp_path):
    assert load_render_settings(tmp_path / "none.dat") is RenderMode.UNICODE_BLOCK_ELEMENTS
    short = tmp_path / "short.dat"
    short.write_bytes(b"\x01")
    assert load_render_settings(short) is RenderMode.UNICODE_BLOCK_ELEMENTS


def test_choose_render_mode_valid():
    assert choose_render_mode("3") is RenderMode.EMOJI
    assert choose_render_mode("  5abc\n") is RenderMode.ASCII_ONLY
    assert choose_render_mode("1") is RenderMode.UNICODE_BLOCK_ELEMENTS


@pytest.mark.parametrize("answer", ["", "0", "6", "x", "-2"])
def test_choose_render_mode_invalid(answer):
    with pytest.raises(ValueError):
        choose_render_mode(answer)


def test_init_uses_existing_file(tmp_path):
    path = tmp_path / "cfg.dat"
    save_render_settings(RenderMode.EMOJI, path)
    asked = []
    assert init_render_mode(path, asked.append) is RenderMode.EMOJI
    assert asked == []


def test_init_asks_and_saves(tmp_path):
    path = tmp_path / "cfg.dat"
    menus = []

    def ask(menu):
        menus.append(menu)
        return "2"

    assert init_render_mode(path, ask) is RenderMode.BACKGROUND_COLOR
    assert menus == [render_preference_menu()]
    assert load_render_settings(path) is RenderMode.BACKGROUND_COLOR


@mock.patch("time.sleep")
def test_init_invalid_answer_falls_back(sleep, tmp_path, capsys):
    path = tmp_path / "cfg.dat"
    assert init_render_mode(path, lambda menu: "9") is RenderMode.UNICODE_BLOCK_ELEMENTS
    assert "Invalid choice" in capsys.readouterr().out
    assert sleep.call_count == 1
    assert path.read_bytes() == struct.pack("<i", 0)