"""Immutable board value for Edgeline.

A ``Board`` owns its size and a sparse mapping from occupied ``Position`` to
``StoneColor``. Empty cells are simply absent from the mapping. Every
mutation returns a new ``Board``; callers that keep history just keep the old
instances.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from ..errors import InvalidMoveError, InvalidStateError
from ..models import MoveRejection, StoneColor
from .geometry import BoardGeometry, Position, in_bounds

__all__ = ["Board", "DEFAULT_BOARD_SIZE"]

DEFAULT_BOARD_SIZE = 48


class Board:
    """Sparse, value-immutable grid of stones."""

    __slots__ = ("size", "_stones", "_view")

    def __init__(
        self,
        size: int = DEFAULT_BOARD_SIZE,
        stones: Mapping[Position, StoneColor] | None = None,
    ):
        self.size = size
        self._stones: dict[Position, StoneColor] = {}
        if stones:
            for pos, color in stones.items():
                pos = Position(*pos)
                if not in_bounds(pos, size):
                    raise InvalidStateError(
                        "Stone outside the board",
                        context={"position": str(pos), "size": size},
                    )
                self._stones[pos] = StoneColor(color)
        self._view = MappingProxyType(self._stones)

    @classmethod
    def _from_trusted(cls, size: int, stones: dict[Position, StoneColor]) -> Board:
        # Skips validation; only used for boards derived from a valid board.
        board = cls.__new__(cls)
        board.size = size
        board._stones = stones
        board._view = MappingProxyType(stones)
        return board

    @property
    def stones(self) -> Mapping[Position, StoneColor]:
        """Read-only view of occupied cells."""
        return self._view

    @property
    def geometry(self) -> BoardGeometry:
        return BoardGeometry.for_size(self.size)

    @property
    def stone_count(self) -> int:
        return len(self._stones)

    def is_valid_position(self, pos: Position) -> bool:
        return 0 <= pos[0] < self.size and 0 <= pos[1] < self.size

    def is_empty(self, pos: Position) -> bool:
        return pos not in self._stones

    def get_stone_at(self, pos: Position) -> StoneColor | None:
        return self._stones.get(pos)

    def place_stone(self, pos: Position, color: StoneColor) -> Board:
        """Return a new board with ``color`` at ``pos``.

        Raises:
            InvalidMoveError: if ``pos`` is off the board or occupied.
        """
        if not self.is_valid_position(pos):
            raise InvalidMoveError(
                "Position is outside the board",
                rejection=MoveRejection.OUT_OF_BOUNDS,
                context={"position": str(pos), "size": self.size},
            )
        if pos in self._stones:
            raise InvalidMoveError(
                "Position is already occupied",
                rejection=MoveRejection.OCCUPIED,
                context={"position": str(pos)},
            )
        stones = dict(self._stones)
        stones[Position(*pos)] = color
        return Board._from_trusted(self.size, stones)

    def remove_stones(self, positions: Iterable[Position]) -> Board:
        """Return a new board without the given stones. Empty cells are ignored."""
        stones = dict(self._stones)
        for pos in positions:
            stones.pop(pos, None)
        return Board._from_trusted(self.size, stones)

    def positions_of(self, color: StoneColor) -> list[Position]:
        return [pos for pos, c in self._stones.items() if c == color]

    def count(self, color: StoneColor) -> int:
        return sum(1 for c in self._stones.values() if c == color)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.size == other.size and self._stones == other._stones

    def __hash__(self) -> int:
        return hash((self.size, frozenset(self._stones.items())))

    def __getstate__(self):
        return {"size": self.size, "stones": self._stones}

    def __setstate__(self, state) -> None:
        self.size = state["size"]
        self._stones = dict(state["stones"])
        self._view = MappingProxyType(self._stones)

    def __repr__(self) -> str:
        return (
            f"Board(size={self.size}, black={self.count(StoneColor.BLACK)}, "
            f"white={self.count(StoneColor.WHITE)})"
        )
