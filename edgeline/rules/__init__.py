"""Rules layer: board, connectivity, capture resolution and win checks."""

from .board import DEFAULT_BOARD_SIZE, Board
from .capture import MoveResult, check_legality, is_valid_move, process_move
from .connectivity import Region, count_edge_exits, find_group, find_region
from .enclosure import (
    Enclosure,
    EnclosureKind,
    enclosures_owned_by,
    forbidden_positions,
    is_inside_any,
    validate_enclosures,
)
from .geometry import BoardGeometry, Position, star_points
from .win_checker import check_win_condition, winner_by_captures

__all__ = [
    "Board",
    "BoardGeometry",
    "DEFAULT_BOARD_SIZE",
    "Enclosure",
    "EnclosureKind",
    "MoveResult",
    "Position",
    "Region",
    "check_legality",
    "check_win_condition",
    "count_edge_exits",
    "enclosures_owned_by",
    "find_group",
    "find_region",
    "forbidden_positions",
    "is_inside_any",
    "is_valid_move",
    "process_move",
    "star_points",
    "validate_enclosures",
    "winner_by_captures",
]
