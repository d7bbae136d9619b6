"""Score records: an AVL tree of play results and its binary file format."""

from __future__ import annotations

import logging
import os
import struct
import time as _time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

__all__ = [
    "RECORDS_FILE",
    "NAME_LIMIT",
    "PlayResult",
    "ScoreTree",
    "encode_records",
    "decode_records",
    "save_tree",
    "load_tree",
    "format_result",
]

log = logging.getLogger(__name__)

RECORDS_FILE = "play_result.dat"
# A stored name holds at most this many bytes; the field is 30 bytes wide
# including its terminator.
NAME_LIMIT = 29

_NUMBERS = struct.Struct("<Qq")

PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class PlayResult:
    """One finished game: player name, score and the time it ended."""

    name: str
    point: int
    time: int
    rank: int = 0

    @property
    def key(self) -> tuple[int, int]:
        """Ordering key: score first, then time."""
        return (self.point, self.time)


@dataclass
class _Node:
    data: PlayResult
    left: Optional["_Node"] = None
    right: Optional["_Node"] = None
    height: int = 1


def _height(node: Optional[_Node]) -> int:
    return node.height if node is not None else 0


def _update(node: _Node) -> None:
    node.height = 1 + max(_height(node.left), _height(node.right))


def _rotate_left(z: _Node) -> _Node:
    y = z.right
    assert y is not None
    z.right = y.left
    y.left = z
    _update(z)
    _update(y)
    return y


def _rotate_right(z: _Node) -> _Node:
    y = z.left
    assert y is not None
    z.left = y.right
    y.right = z
    _update(z)
    _update(y)
    return y


class ScoreTree:
    """Balanced tree of play results ordered by (score, time).

    A result whose score and time both equal those of a stored one is ignored.
    """

    def __init__(self) -> None:
        self._root: Optional[_Node] = None
        self._size = 0

    def insert(self, result: PlayResult) -> bool:
        """Add a result; return False if an equal (score, time) was already there."""
        added = [False]
        self._root = self._insert(self._root, result, added)
        if added[0]:
            self._size += 1
        return added[0]

    def _insert(self, node: Optional[_Node], data: PlayResult, added: list) -> _Node:
        if node is None:
            added[0] = True
            return _Node(data)
        key = data.key
        if key < node.data.key:
            node.left = self._insert(node.left, data, added)
        elif key > node.data.key:
            node.right = self._insert(node.right, data, added)
        else:
            return node

        _update(node)
        balance = _height(node.left) - _height(node.right)

        if balance > 1 and node.left is not None:
            if key < node.left.data.key:
                return _rotate_right(node)
            if key > node.left.data.key:
                node.left = _rotate_left(node.left)
                return _rotate_right(node)
        if balance < -1 and node.right is not None:
            if key > node.right.data.key:
                return _rotate_left(node)
            if key < node.right.data.key:
                node.right = _rotate_right(node.right)
                return _rotate_left(node)
        return node

    def __iter__(self) -> Iterator[PlayResult]:
        """Yield results from the lowest score to the highest."""
        stack: list[_Node] = []
        node = self._root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            yield node.data
            node = node.right

    def __len__(self) -> int:
        return self._size

    def descending(self) -> Iterator[PlayResult]:
        """Yield results from the highest score to the lowest."""
        stack: list[_Node] = []
        node = self._root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.right
            node = stack.pop()
            yield node.data
            node = node.left

    def min(self) -> Optional[PlayResult]:
        """The lowest result, or None when empty."""
        node = self._root
        if node is None:
            return None
        while node.left is not None:
            node = node.left
        return node.data

    def max(self) -> Optional[PlayResult]:
        """The highest result, or None when empty."""
        node = self._root
        if node is None:
            return None
        while node.right is not None:
            node = node.right
        return node.data

    def height(self) -> int:
        """Height of the tree; 0 when empty."""
        return _height(self._root)

    def by_name(self, name: str) -> list[PlayResult]:
        """Results with exactly this name, highest score first."""
        return [r for r in self.descending() if r.name == name]

    def by_score(self, score: int) -> list[PlayResult]:
        """Results with exactly this score, latest first."""
        return self.in_range(score, score)

    def in_range(self, low: int, high: int) -> list[PlayResult]:
        """Results with low <= score <= high, highest first."""
        return [r for r in self.descending() if low <= r.point <= high]


def encode_records(results: Iterable[PlayResult]) -> bytes:
    """Serialise results: NUL-terminated name, then score and time as 64-bit LE."""
    parts = []
    for result in results:
        if "\0" in result.name:
            raise ValueError("name must not contain a NUL character")
        raw = result.name.encode("utf-8")[:NAME_LIMIT]
        raw = raw.decode("utf-8", errors="ignore").encode("utf-8")
        try:
            numbers = _NUMBERS.pack(result.point, result.time)
        except struct.error as exc:
            raise ValueError(f"cannot store result {result!r}: {exc}") from exc
        parts.append(raw + b"\0" + numbers)
    return b"".join(parts)


def decode_records(data: bytes) -> list[PlayResult]:
    """Parse bytes written by encode_records.

    A trailing name with no terminator marks the end of the data.
    """
    results = []
    pos = 0
    while True:
        end = data.find(b"\0", pos)
        if end < 0:
            break
        raw = data[pos:end][:NAME_LIMIT]
        name = raw.decode("utf-8", errors="ignore")
        start = end + 1
        chunk = data[start:start + _NUMBERS.size]
        if len(chunk) < _NUMBERS.size:
            raise ValueError(f"truncated record at offset {pos}")
        point, when = _NUMBERS.unpack(chunk)
        results.append(PlayResult(name, point, when))
        pos = start + _NUMBERS.size
    return results


def _temp_path(path: Path) -> Path:
    return path.with_name(f"{path.stem}_temp{path.suffix}")


def save_tree(tree: ScoreTree, path: PathLike = RECORDS_FILE) -> None:
    """Write the tree to path through a temporary file, then swap it in."""
    target = Path(path)
    temp = _temp_path(target)
    temp.write_bytes(encode_records(tree))
    os.replace(temp, target)


def load_tree(path: PathLike = RECORDS_FILE) -> ScoreTree:
    """Read a tree from path; a missing file gives an empty tree."""
    tree = ScoreTree()
    try:
        data = Path(path).read_bytes()
    except FileNotFoundError:
        log.warning("No score records at %s", path)
        return tree
    for result in decode_records(data):
        tree.insert(result)
    return tree


def format_result(result: PlayResult) -> str:
    """One display line for a result."""
    if result.time == 0:
        return f"Name: {result.name}, Point: {result.point}, Time: N/A"
    return f"{result.name}\t{result.point}\t{_time.ctime(result.time)}"