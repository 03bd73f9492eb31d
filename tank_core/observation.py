"""Wire models for the per-tick observation feed and the outbound action."""

from __future__ import annotations

from enum import Enum
from typing import Iterator, List, Tuple

from pydantic import BaseModel, Field, model_validator

from .cells import CellContent, Facing, Move
from .commands import Command


class CellKind(Enum):
    EMPTY = "empty"
    ROCK = "rock"
    DESTROYED_TANK = "destroyed_tank"
    TANK_UP = "tank_up"
    TANK_DOWN = "tank_down"
    TANK_LEFT = "tank_left"
    TANK_RIGHT = "tank_right"


_TANK_FACING = {
    CellKind.TANK_UP: Facing.UP,
    CellKind.TANK_DOWN: Facing.DOWN,
    CellKind.TANK_LEFT: Facing.LEFT,
    CellKind.TANK_RIGHT: Facing.RIGHT,
}


class VisibleCell(BaseModel):
    x: int
    y: int
    contents: CellKind = CellKind.EMPTY
    player: int = 0

    def to_content(self) -> CellContent:
        if self.contents is CellKind.EMPTY:
            return CellContent.empty()
        if self.contents is CellKind.ROCK:
            return CellContent.rock()
        if self.contents is CellKind.DESTROYED_TANK:
            return CellContent.destroyed_tank()
        return CellContent.tank(_TANK_FACING[self.contents], self.player)


class Observation(BaseModel):
    """Read-only snapshot of what the agent sees this tick."""

    my_id: int
    x: int
    y: int
    facing: Facing
    visible_cells: List[VisibleCell] = Field(default_factory=list)
    grid_width: int = Field(gt=0)
    grid_height: int = Field(gt=0)
    vision_radius: int = Field(ge=0)
    kills: int = 0
    shots_fired: int = 0
    # Host telemetry, only shown in traces.
    empty_seen: int = 0
    rocks_seen: int = 0
    score: int = 0

    @model_validator(mode="after")
    def _inside_grid(self) -> "Observation":
        if not (0 <= self.x < self.grid_width and 0 <= self.y < self.grid_height):
            raise ValueError(
                f"Own position ({self.x}, {self.y}) outside {self.grid_width}x{self.grid_height} grid"
            )
        for cell in self.visible_cells:
            if not (0 <= cell.x < self.grid_width and 0 <= cell.y < self.grid_height):
                raise ValueError(
                    f"Visible cell ({cell.x}, {cell.y}) outside {self.grid_width}x{self.grid_height} grid"
                )
        return self

    @property
    def position(self) -> Tuple[int, int]:
        return self.x, self.y

    def contents(self) -> Iterator[Tuple[int, int, CellContent]]:
        for cell in self.visible_cells:
            yield cell.x, cell.y, cell.to_content()


class ActionCommand(BaseModel):
    move: Move = Move.STAY
    fire: bool = False

    @classmethod
    def from_command(cls, command: Command) -> "ActionCommand":
        return cls(move=command.move, fire=command.fire)


class EndPayload(BaseModel):
    kills: int = 0
    score: int = 0
