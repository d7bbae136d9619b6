"""Terminal Tetris with a searchable score history."""

__version__ = "1.0.0"
__all__ = ["cli", "game", "records", "rendering", "terminal"]