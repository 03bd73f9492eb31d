from __future__ import annotations

from typing import List, Tuple

from .cells import Facing, Move

# Up means +y.
MOVE_DELTAS = {
    Move.UP: (0, 1),
    Move.DOWN: (0, -1),
    Move.RIGHT: (1, 0),
    Move.LEFT: (-1, 0),
}

FACING_OF_MOVE = {
    Move.UP: Facing.UP,
    Move.DOWN: Facing.DOWN,
    Move.LEFT: Facing.LEFT,
    Move.RIGHT: Facing.RIGHT,
}

MOVE_OF_FACING = {facing: move for move, facing in FACING_OF_MOVE.items()}


def manhattan(a: Tuple[int, int], b: Tuple[int, int]) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def neighbors4(cell: Tuple[int, int]) -> List[Tuple[int, int]]:
    # Up, Down, Right, Left. The order feeds A* tie-breaking.
    x, y = cell
    return [(x, y + 1), (x, y - 1), (x + 1, y), (x - 1, y)]


def in_bounds(cell: Tuple[int, int], width: int, height: int) -> bool:
    return 0 <= cell[0] < width and 0 <= cell[1] < height


def step(cell: Tuple[int, int], move: Move) -> Tuple[int, int]:
    dx, dy = MOVE_DELTAS[move]
    return cell[0] + dx, cell[1] + dy


def sign(value: int) -> int:
    return (value > 0) - (value < 0)
