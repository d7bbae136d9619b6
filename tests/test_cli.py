import io
import os

import pytest

from textetris.cli import display_menu, main, play_game, print_records, search_records
from textetris.records import NAME_LIMIT, PlayResult, ScoreTree, load_tree, save_tree
from textetris.rendering import RenderMode, Renderer, save_render_settings


def _tree(*results):
    tree = ScoreTree()
    for result in results:
        tree.insert(result)
    return tree


@pytest.fixture
def sample_tree():
    return _tree(
        PlayResult("alice", 300, 0),
        PlayResult("bob", 100, 0),
        PlayResult("alice", 200, 0),
    )


def _pipe_stdin(data: bytes):
    r, w = os.pipe()
    os.write(w, data)
    os.close(w)
    return os.fdopen(r, "r")


def test_display_menu_skips_invalid_entries():
    out = io.StringIO()
    choice = display_menu(io.StringIO("9\nabc\n\n2\n"), out)
    assert choice == 2
    assert out.getvalue().count("GAME MENU") == 3


def test_display_menu_accepts_leading_number():
    assert display_menu(io.StringIO("3xyz\n"), io.StringIO()) == 3


def test_display_menu_raises_on_eof():
    with pytest.raises(EOFError):
        display_menu(io.StringIO("0\n"), io.StringIO())


def test_search_by_name_lists_highest_first(sample_tree):
    out = io.StringIO()
    search_records(sample_tree, io.StringIO("1\nalice\n\n"), out)
    text = out.getvalue()
    first = text.index("Name: alice, Point: 300, Time: N/A")
    second = text.index("Name: alice, Point: 200, Time: N/A")
    assert first < second
    assert "bob" not in text


def test_search_by_name_not_found(sample_tree):
    out = io.StringIO()
    search_records(sample_tree, io.StringIO("1 carol\n\n"), out)
    assert "No records found for name: carol" in out.getvalue()


def test_search_by_score(sample_tree):
    out = io.StringIO()
    search_records(sample_tree, io.StringIO("2\n100\n\n"), out)
    text = out.getvalue()
    assert "Name: bob, Point: 100, Time: N/A" in text
    assert "Point: 300" not in text


def test_search_by_score_not_found(sample_tree):
    out = io.StringIO()
    search_records(sample_tree, io.StringIO("2\n7\n\n"), out)
    assert "No records found for score: 7" in out.getvalue()


def test_search_by_range(sample_tree):
    out = io.StringIO()
    search_records(sample_tree, io.StringIO("3\n150 300\n\n"), out)
    text = out.getvalue()
    assert "Point: 300" in text
    assert "Point: 200" in text
    assert "Point: 100," not in text


def test_search_by_range_not_found(sample_tree):
    out = io.StringIO()
    search_records(sample_tree, io.StringIO("3\n400 500\n\n"), out)
    assert "No records found for score range: 400 - 500" in out.getvalue()


def test_search_invalid_choice(sample_tree):
    out = io.StringIO()
    search_records(sample_tree, io.StringIO("5\n"), out)
    assert "Invalid choice!" in out.getvalue()


def test_print_records_empty():
    out = io.StringIO()
    count = print_records(ScoreTree(), io.StringIO("\n"), out)
    assert count == 0
    assert "No records found!" in out.getvalue()


def test_print_records_counts_and_orders(sample_tree):
    out = io.StringIO()
    count = print_records(sample_tree, io.StringIO("\n"), out)
    text = out.getvalue()
    assert count == len(sample_tree)
    assert f"Total records: {count}" in text
    assert text.index("Point: 300") < text.index("Point: 200") < text.index("Point: 100,")


def test_play_game_quit_records_result():
    tree = ScoreTree()
    out = io.StringIO()
    stdin = _pipe_stdin(b"palice\n\n")
    try:
        result = play_game(Renderer(RenderMode.ASCII_ONLY), tree, stdin, out)
    finally:
        stdin.close()
    text = out.getvalue()
    assert "[ SCORE: 0 ]" in text
    assert "GAME OVER!" in text
    assert "Final Score: 0" in text
    assert result.name == "alice"
    assert result.point == 0
    assert list(tree) == [result]


def test_play_game_truncates_long_name():
    tree = ScoreTree()
    stdin = _pipe_stdin(b"p" + b"a" * 40 + b"\n\n")
    try:
        result = play_game(Renderer(), tree, stdin, io.StringIO())
    finally:
        stdin.close()
    assert result.name == "a" * NAME_LIMIT


def test_main_quit_keeps_records(tmp_path, monkeypatch, capsys):
    records = tmp_path / "records.dat"
    config = tmp_path / "config.dat"
    save_tree(_tree(PlayResult("alice", 300, 0)), records)
    save_render_settings(RenderMode.EMOJI, config)
    monkeypatch.setattr("sys.stdin", io.StringIO("3\n\n4\n"))
    status = main(["--records", str(records), "--config", str(config)])
    assert status == 0
    assert "Total records: 1" in capsys.readouterr().out
    assert [r.name for r in load_tree(records)] == ["alice"]


def test_main_writes_records_file_on_eof(tmp_path, monkeypatch):
    records = tmp_path / "records.dat"
    config = tmp_path / "config.dat"
    save_render_settings(RenderMode.ASCII_ONLY, config)
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    status = main(["--records", str(records), "--config", str(config)])
    assert status == 0
    assert records.read_bytes() == b""