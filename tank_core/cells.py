"""
Grid cell model: facings, moves, occupancy variants and the per-cell record
that GridMemory and the A* search share.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Facing(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class Move(Enum):
    STAY = "stay"
    ROTATE_LEFT = "rotate_left"
    ROTATE_RIGHT = "rotate_right"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class Occupancy(Enum):
    EMPTY = 1
    ROCK = 2
    DESTROYED_TANK = 3
    TANK = 4


TERRAIN = frozenset({Occupancy.ROCK, Occupancy.DESTROYED_TANK})

TANK_SYMBOLS = {
    Facing.UP: "^",
    Facing.DOWN: "v",
    Facing.LEFT: "<",
    Facing.RIGHT: ">",
}


@dataclass(frozen=True)
class CellContent:
    """What occupies a cell. `facing` and `owner_id` are set only for TANK."""

    kind: Occupancy = Occupancy.EMPTY
    facing: Optional[Facing] = None
    owner_id: int = 0

    @classmethod
    def empty(cls) -> "CellContent":
        return cls(Occupancy.EMPTY)

    @classmethod
    def rock(cls) -> "CellContent":
        return cls(Occupancy.ROCK)

    @classmethod
    def destroyed_tank(cls) -> "CellContent":
        return cls(Occupancy.DESTROYED_TANK)

    @classmethod
    def tank(cls, facing: Facing, owner_id: int) -> "CellContent":
        return cls(Occupancy.TANK, facing, owner_id)

    @property
    def is_terrain(self) -> bool:
        return self.kind in TERRAIN

    @property
    def is_tank(self) -> bool:
        return self.kind is Occupancy.TANK

    @property
    def blocks(self) -> bool:
        return self.kind is not Occupancy.EMPTY

    def symbol(self) -> str:
        if self.kind is Occupancy.EMPTY:
            return "."
        if self.kind is Occupancy.ROCK:
            return "#"
        if self.kind is Occupancy.DESTROYED_TANK:
            return "D"
        if self.kind is Occupancy.TANK:
            return TANK_SYMBOLS[self.facing]
        raise ValueError(f"Unknown occupancy: {self.kind}")


@dataclass
class GridCell:
    """
    One coordinate of the agent's map.

    The search fields (g, h, *_epoch, parent) belong to whichever A* run last
    touched the cell. They are only meaningful while the matching epoch equals
    the pathfinder's current epoch; nothing ever clears them.
    """

    x: int
    y: int
    content: CellContent = CellContent()
    blocked: bool = False
    seen: bool = False
    # Ground under the cell was observed directly (not only a tank on top of it).
    confirmed: bool = False

    g: int = -1
    h: int = -1
    open_epoch: int = -1
    closed_epoch: int = -1
    goal_epoch: int = -1
    parent: Optional[Tuple[int, int]] = None
    parent_epoch: int = -1

    @property
    def pos(self) -> Tuple[int, int]:
        return self.x, self.y

    @property
    def f(self) -> int:
        return self.g + self.h

    @property
    def terrain_blocked(self) -> bool:
        return self.blocked and self.content.is_terrain

    def parent_in(self, epoch: int) -> Optional[Tuple[int, int]]:
        if self.parent_epoch != epoch:
            return None
        return self.parent
