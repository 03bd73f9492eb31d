"""
Finite State Machine (FSM)
Two states: EXPLORE walks A* paths to unseen cells, BATTLE aims at an aligned
enemy. BATTLE is sticky: it is left only when our kill count rises or the
shot cap runs out, never just because the enemy dropped out of sight.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .cells import Facing, Move
from .commands import Command, PathFollower, rotation_for
from .config import AgentConfig
from .geometry import FACING_OF_MOVE, manhattan, sign
from .grid_memory import GridMemory
from .observation import Observation
from .pathfinder import AStarPathfinder, Path


class AgentState(Enum):
    EXPLORE = 1
    BATTLE = 2


class IllegalStateError(RuntimeError):
    pass


class BehaviorController:
    def __init__(
        self,
        memory: GridMemory,
        pathfinder: AStarPathfinder,
        rng: np.random.Generator,
        config: Optional[AgentConfig] = None,
        name: str = "FSM",
    ):
        self.memory = memory
        self.pathfinder = pathfinder
        self.rng = rng
        self.config = config or AgentConfig()
        self.name = name

        self.current_state = AgentState.EXPLORE
        self.initialized = False

        # Explore
        self.explore_target: Optional[Tuple[int, int]] = None
        self.follower = PathFollower()
        self.explore_command = Command.stay()

        # Battle
        self.in_battle = False
        self.target_tank: Optional[Tuple[int, int]] = None
        self.battle_command: Optional[Command] = None
        self.kills_at_engagement = 0
        self.battle_ticks = 0

        self._handlers: Dict[AgentState, Callable[[Observation], None]] = {
            AgentState.EXPLORE: self._explore,
            AgentState.BATTLE: self._battle,
        }

    @property
    def path(self) -> Optional[Path]:
        return self.follower.path

    # ------------------------------------------------------------------ tick

    def begin_tick(self, obs: Observation) -> None:
        """Per-tick bookkeeping before decide(): first target, battle exits."""
        if not self.initialized:
            self.initialized = True
            self._find_unseen_square(obs, advance=False)

        if self.in_battle:
            if obs.kills > self.kills_at_engagement:
                self._log(f"kill confirmed ({self.kills_at_engagement} -> {obs.kills})")
                self._exit_battle()
            elif self.battle_ticks >= self.config.shot_cap:
                self._log(f"shot cap {self.config.shot_cap} reached")
                self._exit_battle()

    def decide(self, obs: Observation) -> AgentState:
        detected = self.enemy_in_sight(obs)
        if detected is not None:
            self.target_tank = detected

        new_state = AgentState.BATTLE if (detected is not None or self.in_battle) else AgentState.EXPLORE
        if new_state != self.current_state:
            self._change_state(new_state)

        handler = self._handlers.get(self.current_state)
        if handler is None:
            raise IllegalStateError(f"Illegal state in decide(): {self.current_state!r}")
        handler(obs)
        return self.current_state

    def get_command(self) -> Command:
        if not self.in_battle:
            return self.explore_command
        # Counts fetched BATTLE ticks, fire or not.
        self.battle_ticks += 1
        return self.battle_command

    def _change_state(self, new_state: AgentState) -> None:
        self._log(f"FSM: {self.current_state.name} -> {new_state.name}")
        self.current_state = new_state

    def _log(self, message: str) -> None:
        if self.config.verbose:
            print(f"[{self.name}] {message}")

    # ------------------------------------------------------------ perception

    def enemy_in_sight(self, obs: Observation) -> Optional[Tuple[int, int]]:
        """First live enemy tank in our row or column with a terrain-free line."""
        me = obs.position
        for x, y, content in obs.contents():
            if not content.is_tank or content.owner_id == obs.my_id:
                continue
            if manhattan(me, (x, y)) > obs.vision_radius:
                continue
            dx, dy = x - me[0], y - me[1]
            if dx != 0 and dy != 0:
                continue
            if dx == 0 and dy == 0:
                continue
            if self._line_clear(me, (x, y)):
                return x, y
        return None

    def _line_clear(self, a: Tuple[int, int], b: Tuple[int, int]) -> bool:
        """Cells strictly between a and b (same row or column) hold no terrain."""
        if a[0] == b[0]:
            lo, hi = sorted((a[1], b[1]))
            between = [(a[0], y) for y in range(lo + 1, hi)]
        else:
            lo, hi = sorted((a[0], b[0]))
            between = [(x, a[1]) for x in range(lo + 1, hi)]
        return not any(self.memory.is_terrain_blocked(x, y) for x, y in between)

    # --------------------------------------------------------------- explore

    def _explore(self, obs: Observation) -> None:
        target = self.explore_target
        if target is None or self.memory.cell(*target).seen:
            self._find_unseen_square(obs, advance=True)
            return

        command = self.follower.advance_along_path(self.memory, obs.position, obs.facing)
        if command is None:
            # Path blocked, finished or lost.
            self._find_unseen_square(obs, advance=True)
            return
        self.explore_command = command

    def _find_unseen_square(self, obs: Observation, advance: bool) -> None:
        """Pick a random unseen cell we can reach and plan a path to it."""
        me = obs.position
        candidates = self.memory.unseen_cells()
        attempts = min(len(candidates), self.config.max_target_attempts)

        for idx in self.rng.permutation(len(candidates))[:attempts]:
            goal = (int(candidates[idx][0]), int(candidates[idx][1]))
            path = self.pathfinder.find_path(me, goal)
            if path is not None:
                self._follow(goal, path, obs, advance)
                return

        # Nothing left to explore (or nothing reachable): idle on our own cell.
        self._follow(me, self.pathfinder.find_path(me, me), obs, advance)

    def _follow(self, goal: Tuple[int, int], path: Path, obs: Observation, advance: bool) -> None:
        self.explore_target = goal
        self.follower = PathFollower(path)
        if advance:
            command = self.follower.advance_along_path(self.memory, obs.position, obs.facing)
            self.explore_command = command if command is not None else Command.stay()

    # ---------------------------------------------------------------- battle

    def _battle(self, obs: Observation) -> None:
        if not self.in_battle:
            self.in_battle = True
            self.kills_at_engagement = obs.kills
            self.battle_ticks = 0

        me = obs.position
        tx, ty = self.target_tank
        dx, dy = tx - me[0], ty - me[1]

        command = self._aim(dx, dy, obs.facing)
        if command is None:
            command = self._approach(dx, dy, obs.facing)
        if command is None:
            # No rule covers this offset; drop the engagement without a new command.
            self._log(f"no approach rule for offset ({dx}, {dy}), leaving battle")
            self.in_battle = False
            self._change_state(AgentState.EXPLORE)
            return
        self.battle_command = command

    @staticmethod
    def _aim(dx: int, dy: int, facing: Facing) -> Optional[Command]:
        """Aligned target: fire if facing it, otherwise turn toward it."""
        if dx == 0 and dy == 0:
            return None
        if dx == 0:
            desired = Move.UP if dy > 0 else Move.DOWN
        elif dy == 0:
            desired = Move.RIGHT if dx > 0 else Move.LEFT
        else:
            return None

        rotation = rotation_for(desired, facing)
        if rotation is Move.STAY:
            return Command.shoot()
        return Command(rotation)

    @staticmethod
    def _approach(dx: int, dy: int, facing: Facing) -> Optional[Command]:
        """
        Near-diagonal target (one row or column off): step sideways into line,
        or turn so that step is possible next tick. Greedy; it does not look
        at whether the aligning cell is free.
        """
        candidates: List[Move] = []
        if abs(dx) == 1:
            candidates.append(Move.RIGHT if sign(dx) > 0 else Move.LEFT)
        if abs(dy) == 1:
            candidates.append(Move.UP if sign(dy) > 0 else Move.DOWN)
        if not candidates:
            return None

        for move in candidates:
            if FACING_OF_MOVE[move] is facing:
                return Command(move)
        return Command(rotation_for(candidates[0], facing))

    def _exit_battle(self) -> None:
        self.in_battle = False
        self.target_tank = None
        self.battle_command = None
        self.battle_ticks = 0
