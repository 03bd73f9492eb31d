from __future__ import annotations

from typing import Optional

import numpy as np

from .commands import Command
from .config import AgentConfig
from .fsm import AgentState, BehaviorController
from .grid_memory import GridMemory
from .observation import Observation
from .pathfinder import AStarPathfinder
from .render import render_map, render_search


class GridTankAgent:
    """
    One agent's whole decision context. Everything the tick pipeline mutates
    lives here; two agents never share state.
    """

    def __init__(self, name: str = "GridTank", config: Optional[AgentConfig] = None):
        self.name = name
        self.config = config or AgentConfig()
        self.is_destroyed = False
        self.tick = 0
        self.rng = np.random.default_rng(self.config.seed)

        self.memory: Optional[GridMemory] = None
        self.pathfinder: Optional[AStarPathfinder] = None
        self.controller: Optional[BehaviorController] = None
        self.last_command: Optional[Command] = None

        self._log("online")

    def _init_world(self, obs: Observation) -> None:
        self.memory = GridMemory(obs.grid_width, obs.grid_height)
        self.pathfinder = AStarPathfinder(self.memory)
        self.controller = BehaviorController(
            self.memory, self.pathfinder, self.rng, self.config, name=self.name
        )
        self._log(f"grid {obs.grid_width}x{obs.grid_height}, vision={obs.vision_radius}")

    @property
    def state(self) -> AgentState:
        if self.controller is None:
            return AgentState.EXPLORE
        return self.controller.current_state

    def get_action(self, obs: Observation) -> Command:
        """Run one perception -> decision -> action tick."""
        if self.memory is None:
            self._init_world(obs)
        elif (obs.grid_width, obs.grid_height) != self.memory.grid_dims:
            raise ValueError(
                f"Grid changed from {self.memory.grid_dims} to {(obs.grid_width, obs.grid_height)}"
            )

        self.tick += 1
        self.memory.update(obs.contents(), own_id=obs.my_id)
        self.controller.begin_tick(obs)
        self.controller.decide(obs)
        command = self.controller.get_command()
        self.last_command = command

        if self.config.trace_every and self.tick % self.config.trace_every == 0:
            self._trace(obs, command)
        return command

    def _trace(self, obs: Observation, command: Command) -> None:
        print(f"[{self.name}] tick={self.tick} state={self.state.name} command={command}")
        print(render_map(self.memory, obs))
        print(render_search(self.memory, self.pathfinder, self.controller.path, obs.position, obs.facing))

    def _log(self, message: str) -> None:
        if self.config.verbose:
            print(f"[{self.name}] {message}")

    def destroy(self) -> None:
        self.is_destroyed = True
        self._log("destroyed")

    def end(self, kills: int, score: int) -> None:
        self._log(f"end kills={kills} score={score}")
