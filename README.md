# textetris

Tetris that runs in a text terminal. It keeps a history of finished games,
and you can browse or search that history.

## Installing

    pip install .

## Playing

    textetris [--records FILE] [--config FILE]

`--records` names the score history file (default `play_result.dat`) and
`--config` names the display settings file (default `tetris_config.dat`).
Both defaults are relative to the current directory.

The main menu offers four choices:

1. **Game Start**: play a round. When the round ends you are asked for a name
   (the first word you type, cut to 29 bytes), and the result is added to the
   score history, which is then saved.
2. **Search history**: look up past results by name, by exact score, or by a
   score range (`min max`).
3. **Record Output**: list every stored result, highest score first, with the
   total count.
4. **QUIT**: save the history and leave.

### Controls

| Key | Action            |
|-----|-------------------|
| `j` | move left         |
| `l` | move right        |
| `k` | move down         |
| `i` | rotate            |
| `a` | hard drop         |
| `h` | hold / swap piece |
| `p` | end the round     |

The board is 20 rows by 8 columns. Pieces come from a shuffled bag holding
each of the seven shapes once. Every cleared line is worth 100 points. The
piece falls one row every second; a round ends when a new piece cannot be
placed or when you press `p`.

### Display styles

When the display settings file does not exist, the game asks you to pick a
rendering style and stores your answer in it:

1. Unicode `■` blocks with colour (the default)
2. Coloured background with spaces
3. Emoji squares (experimental)
4. `##` with terminal colours
5. Plain ASCII letter pairs such as `II` and `TT`

An answer outside 1 to 5 selects the default. When the settings are read back
on a later start, only styles 1 to 3 are accepted; a stored 4 or 5 is
replaced by the default style. Delete the settings file to be asked again.

## Files

- The score history: each record is a NUL-terminated UTF-8 name followed by
  the score and the end time as little-endian 64-bit integers. It is written
  to a temporary file first and then swapped into place. A missing file
  starts an empty history; a record cut short raises `ValueError` on loading.
- The display settings: the chosen style as one little-endian 32-bit integer.

## Using the pieces as a library

- `textetris.records`: `PlayResult` (name, score, time) and `ScoreTree`, a
  balanced tree ordered by score and then time. A result with the same score
  and time as a stored one is ignored by `insert`. The tree iterates from the
  lowest score up, and offers `descending()`, `min()`, `max()`, `height()`,
  `by_name()`, `by_score()` and `in_range()`. `encode_records`,
  `decode_records`, `save_tree`, `load_tree` and `format_result` handle the
  file format and display lines.
- `textetris.game`: `Tetris` holds the board, the falling, next and held
  pieces and the score, with `move`, `rotate`, `drop`, `hold`, `lock`,
  `clear_lines` and `render`. It does not touch the terminal. Pass it a
  `random.Random` for repeatable piece sequences. `PieceBag`, `Move`, `shape`
  and `new_table` are available too.
- `textetris.rendering`: `RenderMode`, and `Renderer`, which returns the text
  and escape sequences for each board segment in a given style.
- `textetris.terminal`: `Keyboard`, a context manager for unbuffered key
  input, plus `clear_screen`, `sleep_us` and `init_platform`.
- `textetris.cli`: the menus (`display_menu`, `play_game`, `search_records`,
  `print_records`) and `main`.

## Tests

    pip install .[test]
    pytest