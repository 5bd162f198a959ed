"""Enclosures (forts) and the helpers that treat a list of them as a registry.

An enclosure is created when a region fails to reach the board edge, either
because the opponent stones inside it were captured or because the mover
sealed off empty territory. Its interior is permanently off-limits for
placement by either color. The registry itself is just the caller's list; it
only ever grows.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..errors import InvalidStateError
from ..models import StoneColor
from .geometry import Position

__all__ = [
    "Enclosure",
    "EnclosureKind",
    "enclosures_owned_by",
    "forbidden_positions",
    "is_inside_any",
    "validate_enclosures",
]


class EnclosureKind:
    """Label values used for logging and metrics."""

    CAPTURE = "capture"
    TERRITORY = "territory"


@dataclass(frozen=True, eq=False)
class Enclosure:
    """Owner, encircling wall stones and the enclosed interior."""

    owner: StoneColor
    wall_positions: frozenset[Position]
    interior_positions: frozenset[Position]

    def __post_init__(self) -> None:
        # Accept any iterable of coordinate pairs but always store frozensets.
        object.__setattr__(self, "owner", StoneColor(self.owner))
        object.__setattr__(
            self, "wall_positions", frozenset(Position(*p) for p in self.wall_positions)
        )
        object.__setattr__(
            self,
            "interior_positions",
            frozenset(Position(*p) for p in self.interior_positions),
        )
        if not self.wall_positions.isdisjoint(self.interior_positions):
            raise InvalidStateError(
                "Enclosure wall and interior overlap",
                context={"owner": self.owner.value},
            )

    def contains_position(self, pos: Position) -> bool:
        return pos in self.interior_positions

    def is_wall_position(self, pos: Position) -> bool:
        return pos in self.wall_positions

    @property
    def wall_edges(self) -> list[tuple[Position, Position]]:
        """Pairs of 8-adjacent wall stones, each pair listed once with the
        lexicographically smaller position first. Renderers draw these."""
        edges: list[tuple[Position, Position]] = []
        for pos in sorted(self.wall_positions):
            for neighbor in pos.all_neighbors():
                if neighbor in self.wall_positions and pos < neighbor:
                    edges.append((pos, neighbor))
        return edges

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Enclosure):
            return NotImplemented
        return self.owner == other.owner and self.wall_positions == other.wall_positions

    def __hash__(self) -> int:
        return hash((self.owner, self.wall_positions))

    def __repr__(self) -> str:
        return (
            f"Enclosure(owner={self.owner.value}, wall={len(self.wall_positions)}, "
            f"interior={len(self.interior_positions)})"
        )


def is_inside_any(pos: Position, enclosures: Iterable[Enclosure]) -> bool:
    """True if ``pos`` is in the interior of any enclosure, whoever owns it."""
    return any(pos in e.interior_positions for e in enclosures)


def forbidden_positions(enclosures: Iterable[Enclosure]) -> frozenset[Position]:
    """Union of all enclosure interiors."""
    cells: set[Position] = set()
    for enclosure in enclosures:
        cells.update(enclosure.interior_positions)
    return frozenset(cells)


def enclosures_owned_by(
    color: StoneColor, enclosures: Iterable[Enclosure]
) -> list[Enclosure]:
    return [e for e in enclosures if e.owner == color]


def validate_enclosures(enclosures: Sequence[Enclosure]) -> None:
    """Check the registry invariants.

    Raises:
        InvalidStateError: if any interior overlaps its own wall or the
            interior of another enclosure.
    """
    seen: dict[Position, int] = {}
    for index, enclosure in enumerate(enclosures):
        if enclosure.wall_positions & enclosure.interior_positions:
            raise InvalidStateError(
                "Enclosure wall overlaps its interior",
                context={"index": index},
            )
        for pos in enclosure.interior_positions:
            if pos in seen:
                raise InvalidStateError(
                    "Enclosure interiors overlap",
                    context={"first": seen[pos], "second": index, "position": str(pos)},
                )
            seen[pos] = index
