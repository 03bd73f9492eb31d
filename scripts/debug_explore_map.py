#!/usr/bin/env python3
"""Ad-hoc debug: run the agent on an ASCII map and print map/search traces."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from tank_core.agent import GridTankAgent  # noqa: E402
from tank_core.cells import Facing, Move  # noqa: E402
from tank_core.commands import Command, rotate  # noqa: E402
from tank_core.config import AgentConfig  # noqa: E402
from tank_core.geometry import MOVE_DELTAS, MOVE_OF_FACING, manhattan, step  # noqa: E402
from tank_core.observation import Observation  # noqa: E402
from tank_core.render import render_map, render_search  # noqa: E402

Cell = Tuple[int, int]

# '#' rock, 'S' our start, 'E' static enemy facing left, anything else empty.
DEFAULT_MAP = [
    "..........",
    "..##......",
    "..#...E...",
    "..#.......",
    "......###.",
    "S.........",
]


def read_map(path: Path) -> List[str]:
    rows = [line.rstrip("\n") for line in path.read_text().splitlines() if line.strip()]
    if not rows:
        raise ValueError(f"Empty map file: {path}")
    width = len(rows[0])
    if any(len(r) != width for r in rows):
        raise ValueError(f"Inconsistent row widths in: {path}")
    return rows


class AsciiWorld:
    """Host stand-in: static rocks, static enemies, a line-of-fire gun."""

    def __init__(self, rows: Sequence[str], vision_radius: int):
        self.height = len(rows)
        self.width = len(rows[0])
        self.vision_radius = vision_radius
        self.rocks: set = set()
        self.wrecks: set = set()
        self.enemies: Dict[Cell, int] = {}
        self.position: Optional[Cell] = None
        self.facing = Facing.UP
        self.kills = 0
        self.shots = 0

        for row_idx, row in enumerate(rows):
            y = self.height - 1 - row_idx
            for x, ch in enumerate(row):
                if ch == "#":
                    self.rocks.add((x, y))
                elif ch == "E":
                    self.enemies[(x, y)] = 2 + len(self.enemies)
                elif ch == "S":
                    self.position = (x, y)
        if self.position is None:
            raise ValueError("Map has no 'S' start cell")

    def _contents(self, cell: Cell) -> Dict:
        x, y = cell
        if cell == self.position:
            return {"x": x, "y": y, "contents": "tank_" + self.facing.value, "player": 1}
        if cell in self.rocks:
            return {"x": x, "y": y, "contents": "rock"}
        if cell in self.wrecks:
            return {"x": x, "y": y, "contents": "destroyed_tank"}
        if cell in self.enemies:
            return {"x": x, "y": y, "contents": "tank_left", "player": self.enemies[cell]}
        return {"x": x, "y": y, "contents": "empty"}

    def observe(self) -> Observation:
        visible = [
            self._contents((x, y))
            for x in range(self.width)
            for y in range(self.height)
            if manhattan((x, y), self.position) <= self.vision_radius
        ]
        return Observation(
            my_id=1,
            x=self.position[0],
            y=self.position[1],
            facing=self.facing,
            visible_cells=visible,
            grid_width=self.width,
            grid_height=self.height,
            vision_radius=self.vision_radius,
            kills=self.kills,
            shots_fired=self.shots,
            rocks_seen=len(self.rocks),
        )

    def _free(self, cell: Cell) -> bool:
        return (
            0 <= cell[0] < self.width
            and 0 <= cell[1] < self.height
            and cell not in self.rocks
            and cell not in self.wrecks
            and cell not in self.enemies
        )

    def apply(self, command: Command) -> None:
        if command.fire:
            self.shots += 1
            self._shoot()
        elif command.move in (Move.ROTATE_LEFT, Move.ROTATE_RIGHT):
            self.facing = rotate(self.facing, command.move)
        elif command.move is not Move.STAY:
            nxt = step(self.position, command.move)
            if self._free(nxt):
                self.position = nxt

    def _shoot(self) -> None:
        dx, dy = MOVE_DELTAS[MOVE_OF_FACING[self.facing]]
        x, y = self.position
        while True:
            x, y = x + dx, y + dy
            if not (0 <= x < self.width and 0 <= y < self.height) or (x, y) in self.rocks:
                return
            if (x, y) in self.enemies:
                del self.enemies[(x, y)]
                self.wrecks.add((x, y))
                self.kills += 1
                return


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the grid tank agent on an ASCII map")
    parser.add_argument("--map", type=Path, default=None, help="ASCII map file (default: built-in)")
    parser.add_argument("--ticks", type=int, default=120)
    parser.add_argument("--vision", type=int, default=3)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--every", type=int, default=20, help="Print traces every N ticks")
    args = parser.parse_args()

    rows = read_map(args.map) if args.map else DEFAULT_MAP
    world = AsciiWorld(rows, args.vision)
    agent = GridTankAgent(name="Debug", config=AgentConfig(seed=args.seed))

    for tick in range(1, args.ticks + 1):
        obs = world.observe()
        command = agent.get_action(obs)
        world.apply(command)

        if tick % args.every == 0 or tick == args.ticks:
            print(f"--- tick {tick} state={agent.state.name} command={command}")
            print(render_map(agent.memory, obs))
            print(render_search(agent.memory, agent.pathfinder, agent.controller.path, obs.position, obs.facing))

    unseen = len(agent.memory.unseen_cells())
    print(f"done: kills={world.kills} shots={world.shots} unseen={unseen}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
