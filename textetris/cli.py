"""Interactive menus: play a game, search and list the stored score records."""

from __future__ import annotations

import argparse
import re
import sys
import time
from typing import IO, Optional

from .game import Move, Tetris
from .records import (
    NAME_LIMIT,
    PlayResult,
    RECORDS_FILE,
    ScoreTree,
    format_result,
    load_tree,
    save_tree,
)
from .rendering import RENDER_CONFIG_FILE, Renderer, init_render_mode
from .terminal import Keyboard, clear_screen, init_platform, sleep_us

__all__ = ["display_menu", "play_game", "search_records", "print_records", "main"]

_TICK_US = 50_000
_FALL_SECONDS = 1.0
_UINT64_MAX = 2**64 - 1
_LEADING_INT = re.compile(r"[+-]?\d+")
_PAUSE = "\n\t\tPress any key to continue..."

_MENU = (
    "\n\n\t\t\t\tText Tetris"
    "\n\t\t\t============================"
    "\n\t\t\t\tGAME MENU\t\n"
    "\n\t\t\t============================"
    "\n\t\t\t   1) Game Start"
    "\n\t\t\t   2) Search history"
    "\n\t\t\t   3) Record Output"
    "\n\t\t\t   4) QUIT"
    "\n\t\t\t============================"
    "\n\t\t\t\t\t SELECT : "
)

_SEARCH_MENU = (
    "\n\n\t\t[ SEARCH RESULT ]\n"
    "\t\t============================\n"
    "\n\t\tWhich method do you want to search?\n"
    "\t\t\t   1) Search by name\n"
    "\t\t\t   2) Search by score\n"
    "\t\t\t   3) Search by score range\n"
    "\t\t============================\n"
    "\n\t\tEnter your choice: "
)

_KEYS = {
    "j": Move.LEFT,
    "l": Move.RIGHT,
    "k": Move.DOWN,
}


class _Input:
    """Whitespace-separated tokens read line by line from a text stream."""

    def __init__(self, stream: IO[str]) -> None:
        self._stream = stream
        self._pending: list[str] = []

    def token(self) -> str:
        while not self._pending:
            line = self._stream.readline()
            if not line:
                raise EOFError("input closed")
            self._pending = line.split()
        return self._pending.pop(0)

    def discard(self) -> None:
        self._pending = []

    def pause(self) -> None:
        self._pending = []
        self._stream.readline()


def _leading_int(token: str) -> Optional[int]:
    match = _LEADING_INT.match(token)
    return int(match.group()) if match else None


def _unsigned(token: str) -> Optional[int]:
    value = _leading_int(token)
    if value is None or not 0 <= value <= _UINT64_MAX:
        return None
    return value


def _fit_name(name: str) -> str:
    return name.encode("utf-8")[:NAME_LIMIT].decode("utf-8", errors="ignore")


def _streams(stdin: Optional[IO[str]], stdout: Optional[IO[str]]) -> tuple[IO[str], IO[str]]:
    return (stdin if stdin is not None else sys.stdin,
            stdout if stdout is not None else sys.stdout)


def display_menu(stdin: Optional[IO[str]] = None, stdout: Optional[IO[str]] = None) -> int:
    """Show the main menu until a choice from 1 to 4 is entered, and return it."""
    inp, out = _streams(stdin, stdout)
    reader = _Input(inp)
    while True:
        clear_screen(out)
        out.write(_MENU)
        out.flush()
        choice = _leading_int(reader.token())
        reader.discard()
        if choice is not None and 1 <= choice <= 4:
            return choice


def play_game(
    renderer: Renderer,
    tree: ScoreTree,
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
) -> PlayResult:
    """Run one game, ask for the player's name and add the result to the tree."""
    out = stdout if stdout is not None else sys.stdout
    game = Tetris()
    with Keyboard(stdin) as keyboard:
        last_fall = time.monotonic()
        while not game.over:
            clear_screen(out)
            out.write(game.render(renderer))
            out.flush()

            now = time.monotonic()
            if now - last_fall >= _FALL_SECONDS:
                game.move(Move.DOWN)
                last_fall = now

            try:
                key = keyboard.read_key().lower() if keyboard.key_pressed() else ""
            except EOFError:
                game.over = True
                key = ""
            if key in _KEYS:
                game.move(_KEYS[key])
            elif key == "i":
                game.rotate()
            elif key == "a":
                game.drop()
            elif key == "h":
                game.hold()
            elif key == "p":
                game.over = True

            sleep_us(_TICK_US)

    inp = stdin if stdin is not None else sys.stdin
    clear_screen(out)
    out.write("\n\n\t\tGAME OVER!\n")
    out.write(f"\t\tFinal Score: {game.point}\n")
    out.write("\n\t\tEnter your name: ")
    out.flush()

    reader = _Input(inp)
    name = _fit_name(reader.token())
    reader.discard()

    result = PlayResult(name, game.point, int(time.time()))
    tree.insert(result)

    out.write(_PAUSE)
    out.flush()
    reader.pause()
    return result


def _write_matches(out: IO[str], matches: list[PlayResult]) -> bool:
    for result in matches:
        out.write(f"\t\t{format_result(result)}\n")
    return bool(matches)


def search_records(
    tree: ScoreTree,
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
) -> None:
    """Ask how to search, then show the matching records."""
    inp, out = _streams(stdin, stdout)
    reader = _Input(inp)
    clear_screen(out)
    out.write(_SEARCH_MENU)
    out.flush()
    choice = _leading_int(reader.token())

    if choice == 1:
        out.write("\n\t\tEnter name to search: ")
        out.flush()
        name = reader.token()
        reader.discard()
        if not _write_matches(out, tree.by_name(name)):
            out.write(f"\n\t\tNo records found for name: {name}\n")
    elif choice == 2:
        out.write("\n\t\tEnter score to search: ")
        out.flush()
        score = _unsigned(reader.token())
        reader.discard()
        if score is None:
            out.write("\n\t\tInvalid score!\n")
        elif not _write_matches(out, tree.by_score(score)):
            out.write(f"\n\t\tNo records found for score: {score}\n")
    elif choice == 3:
        out.write("\n\t\tEnter score range to search (min max): ")
        out.flush()
        low = _unsigned(reader.token())
        high = _unsigned(reader.token())
        reader.discard()
        if low is None or high is None:
            out.write("\n\t\tInvalid score!\n")
        elif not _write_matches(out, tree.in_range(low, high)):
            out.write(f"\n\t\tNo records found for score range: {low} - {high}\n")
    else:
        out.write("\n\t\tInvalid choice!\n")
        out.write(_PAUSE)
        out.flush()
        # The rest of the choice line is what the pause consumes.
        reader.discard()
        return

    out.write(_PAUSE)
    out.flush()
    reader.pause()


def print_records(
    tree: ScoreTree,
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
) -> int:
    """List every record, highest score first; return how many were shown."""
    inp, out = _streams(stdin, stdout)
    reader = _Input(inp)
    clear_screen(out)
    out.write(f"\n\t\t{'NAME':<20} {'SCORE':<10} {'DATE':<20}\n")
    out.write("\t\t================================================\n")

    count = 0
    if len(tree) == 0:
        out.write("\n\t\tNo records found!\n")
    else:
        for result in tree.descending():
            out.write(f"\t\t{format_result(result)}\n")
            count += 1
        out.write(f"\n\t\tTotal records: {count}\n")
    out.write(_PAUSE)
    out.flush()
    reader.pause()
    return count


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="textetris", description="Play falling-block puzzles in the terminal."
    )
    parser.add_argument("--records", default=RECORDS_FILE, help="score records file")
    parser.add_argument("--config", default=RENDER_CONFIG_FILE, help="display settings file")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Run the menu loop until the player quits."""
    args = _parser().parse_args(argv)
    init_platform()
    renderer = Renderer(init_render_mode(args.config))
    tree = load_tree(args.records)
    try:
        while True:
            choice = display_menu()
            if choice == 1:
                play_game(renderer, tree)
                save_tree(tree, args.records)
            elif choice == 2:
                search_records(tree)
            elif choice == 3:
                print_records(tree)
            else:
                break
    except (EOFError, KeyboardInterrupt):
        pass
    save_tree(tree, args.records)
    return 0