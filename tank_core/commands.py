"""
Command translation: path steps and desired facings to the single action
allowed per tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .cells import Facing, Move
from .geometry import MOVE_DELTAS
from .grid_memory import GridMemory
from .pathfinder import Path

ROTATIONS = frozenset({Move.STAY, Move.ROTATE_LEFT, Move.ROTATE_RIGHT})

# (desired direction, current facing) -> rotation. A reversal always turns left.
ROTATION_TABLE = {
    (Move.UP, Facing.UP): Move.STAY,
    (Move.UP, Facing.DOWN): Move.ROTATE_LEFT,
    (Move.UP, Facing.LEFT): Move.ROTATE_RIGHT,
    (Move.UP, Facing.RIGHT): Move.ROTATE_LEFT,
    (Move.DOWN, Facing.UP): Move.ROTATE_LEFT,
    (Move.DOWN, Facing.DOWN): Move.STAY,
    (Move.DOWN, Facing.LEFT): Move.ROTATE_LEFT,
    (Move.DOWN, Facing.RIGHT): Move.ROTATE_RIGHT,
    (Move.LEFT, Facing.UP): Move.ROTATE_LEFT,
    (Move.LEFT, Facing.DOWN): Move.ROTATE_RIGHT,
    (Move.LEFT, Facing.LEFT): Move.STAY,
    (Move.LEFT, Facing.RIGHT): Move.ROTATE_LEFT,
    (Move.RIGHT, Facing.UP): Move.ROTATE_RIGHT,
    (Move.RIGHT, Facing.DOWN): Move.ROTATE_LEFT,
    (Move.RIGHT, Facing.LEFT): Move.ROTATE_LEFT,
    (Move.RIGHT, Facing.RIGHT): Move.STAY,
}

_LEFT_OF = {
    Facing.UP: Facing.LEFT,
    Facing.LEFT: Facing.DOWN,
    Facing.DOWN: Facing.RIGHT,
    Facing.RIGHT: Facing.UP,
}
_RIGHT_OF = {facing: left for left, facing in _LEFT_OF.items()}


@dataclass(frozen=True)
class Command:
    move: Move = Move.STAY
    fire: bool = False

    def __post_init__(self):
        if self.fire and self.move is not Move.STAY:
            raise ValueError(f"Firing is only allowed with STAY, got {self.move.name}")

    @classmethod
    def stay(cls) -> "Command":
        return cls(Move.STAY, False)

    @classmethod
    def shoot(cls) -> "Command":
        return cls(Move.STAY, True)

    def __str__(self) -> str:
        return f"{self.move.name}{' +FIRE' if self.fire else ''}"


def direction_to(frm: Tuple[int, int], to: Tuple[int, int]) -> Move:
    """Cardinal move from `frm` to an orthogonally adjacent `to`, else STAY."""
    delta = (to[0] - frm[0], to[1] - frm[1])
    for move, move_delta in MOVE_DELTAS.items():
        if delta == move_delta:
            return move
    return Move.STAY


def rotation_for(desired: Move, facing: Facing) -> Move:
    return ROTATION_TABLE[(desired, facing)]


def rotate(facing: Facing, rotation: Move) -> Facing:
    """Facing after applying one rotation (or STAY)."""
    if rotation is Move.ROTATE_LEFT:
        return _LEFT_OF[facing]
    if rotation is Move.ROTATE_RIGHT:
        return _RIGHT_OF[facing]
    if rotation is Move.STAY:
        return facing
    raise ValueError(f"Not a rotation: {rotation.name}")


class PathFollower:
    """Walks a Path one atomic action at a time, turning before each step."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path

    def advance_along_path(
        self,
        memory: GridMemory,
        position: Tuple[int, int],
        facing: Facing,
    ) -> Optional[Command]:
        """
        Returns:
            The command for this tick, or None when the caller should replan
            (no path, path finished, next cell blocked, or we drifted off it).
        """
        if self.path is None:
            return None
        next_cell = self.path.next_step()
        if next_cell is None:
            return None
        if memory.is_blocked(*next_cell):
            return None

        direction = direction_to(position, next_cell)
        if direction is Move.STAY:
            return None

        rotation = rotation_for(direction, facing)
        if rotation is not Move.STAY:
            return Command(rotation)

        self.path.advance()
        return Command(direction)
