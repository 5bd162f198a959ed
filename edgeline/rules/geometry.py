"""Grid geometry for square Edgeline boards.

``Position`` is a plain named tuple so it hashes and compares as fast as a
raw ``(x, y)`` pair in the flood-fill loops, while still reading as a value
type at call sites.

``BoardGeometry`` pre-computes the in-bounds 4-neighbour table and the edge
cell set for one board size. Instances are cached per size, so the rules and
AI layers share one table for the whole process.

Usage:
    from edgeline.rules.geometry import BoardGeometry, Position

    geo = BoardGeometry.for_size(48)
    for adj in geo.adjacent[Position(3, 4)]:
        ...
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterator, NamedTuple

# Orthogonal directions used for connectivity.
ORTHOGONAL_DIRECTIONS: tuple[tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))

# Orthogonal plus diagonal, used only for drawing fort walls.
ALL_DIRECTIONS: tuple[tuple[int, int], ...] = (
    (-1, 0),
    (1, 0),
    (0, -1),
    (0, 1),
    (-1, -1),
    (1, -1),
    (-1, 1),
    (1, 1),
)


class Position(NamedTuple):
    """Integer board coordinate."""

    x: int
    y: int

    def neighbors(self) -> tuple[Position, ...]:
        """4-neighbours, not bounds checked."""
        x, y = self.x, self.y
        return (
            Position(x + 1, y),
            Position(x - 1, y),
            Position(x, y + 1),
            Position(x, y - 1),
        )

    def all_neighbors(self) -> tuple[Position, ...]:
        """8-neighbours (orthogonal and diagonal), not bounds checked."""
        return tuple(Position(self.x + dx, self.y + dy) for dx, dy in ALL_DIRECTIONS)

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


def in_bounds(pos: Position, size: int) -> bool:
    return 0 <= pos.x < size and 0 <= pos.y < size


def is_on_edge(pos: Position, size: int) -> bool:
    """True for cells in the outermost ring of the board."""
    return pos.x == 0 or pos.y == 0 or pos.x == size - 1 or pos.y == size - 1


def distance_from_edge(pos: Position, size: int) -> int:
    return min(pos.x, pos.y, size - 1 - pos.x, size - 1 - pos.y)


def board_center(size: int) -> Position:
    return Position(size // 2, size // 2)


def chebyshev_distance(a: Position, b: Position) -> int:
    return max(abs(a.x - b.x), abs(a.y - b.y))


def window(center: Position, radius: int, size: int) -> Iterator[Position]:
    """Yield every in-bounds cell within ``radius`` (Chebyshev) of ``center``."""
    x_lo, x_hi = max(0, center.x - radius), min(size - 1, center.x + radius)
    y_lo, y_hi = max(0, center.y - radius), min(size - 1, center.y + radius)
    for x in range(x_lo, x_hi + 1):
        for y in range(y_lo, y_hi + 1):
            yield Position(x, y)


@lru_cache(maxsize=None)
def star_points(size: int) -> tuple[Position, ...]:
    """Canonical opening points: four corner points, the center and, on
    boards of 19 and up, the four side midpoints."""
    offset = 3 if size >= 13 else 2
    if size <= 2 * offset:
        return (board_center(size),)
    low, high, mid = offset, size - 1 - offset, size // 2
    points = [
        Position(low, low),
        Position(low, high),
        Position(high, low),
        Position(high, high),
        Position(mid, mid),
    ]
    if size >= 19:
        points.extend(
            [
                Position(low, mid),
                Position(high, mid),
                Position(mid, low),
                Position(mid, high),
            ]
        )
    return tuple(points)


class BoardGeometry:
    """Pre-computed geometry tables for one board size.

    ``adjacent`` maps every on-board position to its on-board 4-neighbours,
    which removes the bounds check from every inner loop.
    """

    def __init__(self, size: int):
        self.size = size
        self.adjacent: dict[Position, tuple[Position, ...]] = {}
        self.edge_cells: frozenset[Position] = frozenset()
        self._build_tables()

    @classmethod
    def for_size(cls, size: int) -> BoardGeometry:
        """Get the shared instance for ``size``."""
        return _geometry_for_size(size)

    def _build_tables(self) -> None:
        size = self.size
        edges: set[Position] = set()
        for x in range(size):
            for y in range(size):
                pos = Position(x, y)
                self.adjacent[pos] = tuple(
                    Position(x + dx, y + dy)
                    for dx, dy in ORTHOGONAL_DIRECTIONS
                    if 0 <= x + dx < size and 0 <= y + dy < size
                )
                if is_on_edge(pos, size):
                    edges.add(pos)
        self.edge_cells = frozenset(edges)

    def __repr__(self) -> str:
        return f"BoardGeometry(size={self.size})"


@lru_cache(maxsize=16)
def _geometry_for_size(size: int) -> BoardGeometry:
    return BoardGeometry(size)
