"""
Text rendering of the agent's map and of the last A* search, for traces and
golden-output tests.

Map legend: # rock, . empty, D destroyed tank, ^ v < > tank facing, space unseen.
Search legend: T target, S start, # blocked, p path, * open-list head,
o open, x closed, . anything else.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .cells import TANK_SYMBOLS, Facing
from .grid_memory import GridMemory
from .observation import Observation
from .pathfinder import AStarPathfinder, Path


def render_map(memory: GridMemory, obs: Optional[Observation] = None) -> str:
    width, height = memory.width, memory.height
    digits = "".join(str(x % 10) for x in range(width))
    rule = "-" * width

    lines = ["  " + digits, "  " + rule]
    for y in range(height - 1, -1, -1):
        row = "".join(
            memory.cells[x][y].content.symbol() if memory.cells[x][y].seen else " "
            for x in range(width)
        )
        lines.append(f"{y % 10}|{row}|{y % 10}")
    lines.append("  " + rule)
    lines.append("  " + digits)

    if obs is not None:
        lines.append(
            f"Your tank at ({obs.x},{obs.y}). Empty: {obs.empty_seen}, Rock: {obs.rocks_seen}, "
            f"Shots: {obs.shots_fired}, Kills: {obs.kills}, Score: {obs.score}."
        )
    return "\n".join(lines) + "\n"


def render_search(
    memory: GridMemory,
    pathfinder: AStarPathfinder,
    path: Optional[Path] = None,
    own_position: Optional[Tuple[int, int]] = None,
    own_facing: Facing = Facing.UP,
) -> str:
    head = pathfinder.open_head()
    lines = []
    for y in range(memory.height - 1, -1, -1):
        row = []
        for x in range(memory.width):
            cell = memory.cells[x][y]
            if cell is pathfinder.target:
                row.append("T")
            elif cell is pathfinder.start:
                row.append("S")
            elif cell.blocked:
                row.append("#")
            elif own_position == (x, y):
                row.append(TANK_SYMBOLS[own_facing])
            elif path is not None and (x, y) in path:
                row.append("p")
            elif cell is head:
                row.append("*")
            elif pathfinder.is_open(cell):
                row.append("o")
            elif pathfinder.is_closed(cell):
                row.append("x")
            else:
                row.append(".")
        lines.append("".join(row))
    return "\n".join(lines) + "\n"
