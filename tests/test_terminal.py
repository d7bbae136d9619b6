import io
import locale
import logging
import os
import time
from unittest import mock

import pytest

from textetris.terminal import Keyboard, clear_screen, init_platform, sleep_us


def test_clear_screen_writes_home_and_erase():
    out = io.StringIO()
    clear_screen(out)
    assert out.getvalue() == "\033[H\033[J"


def test_sleep_us_negative_raises():
    with pytest.raises(ValueError):
        sleep_us(-1)


def test_sleep_us_waits_at_least_the_requested_time():
    start = time.monotonic()
    result = sleep_us(20_000)
    elapsed = time.monotonic() - start
    assert result is None
    assert elapsed >= 0.019


def test_sleep_us_zero_returns_promptly():
    start = time.monotonic()
    result = sleep_us(0)
    elapsed = time.monotonic() - start
    assert result is None
    assert elapsed < 0.5


@pytest.fixture
def pipe_stream():
    read_fd, write_fd = os.pipe()
    stream = os.fdopen(read_fd, "r")
    yield stream, write_fd
    stream.close()
    try:
        os.close(write_fd)
    except OSError:
        pass


def test_keyboard_reports_and_reads_keys(pipe_stream):
    stream, write_fd = pipe_stream
    with Keyboard(stream) as kb:
        assert kb.key_pressed() is False
        os.write(write_fd, b"jk")
        assert kb.key_pressed() is True
        assert kb.read_key() == "j"
        assert kb.read_key() == "k"
        assert kb.key_pressed() is False


def test_keyboard_read_after_close_raises_eof(pipe_stream):
    stream, write_fd = pipe_stream
    os.close(write_fd)
    with Keyboard(stream) as kb:
        with pytest.raises(EOFError):
            kb.read_key()


def test_init_platform_selects_utf8_and_tolerates_missing_locale(caplog):
    out = io.StringIO()
    with mock.patch("sys.stdout", out):
        with mock.patch("locale.setlocale", side_effect=locale.Error):
            with caplog.at_level(logging.WARNING):
                init_platform()
    assert out.getvalue() == "\x1b%G"
    assert any("en_US.UTF-8" in record.getMessage() for record in caplog.records)