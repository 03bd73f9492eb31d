"""
Tank Core
Decision core of a grid tank agent: map memory, A* search, FSM and commands.
"""

from .agent import GridTankAgent
from .cells import CellContent, Facing, GridCell, Move, Occupancy
from .commands import Command, PathFollower, direction_to, rotate, rotation_for
from .config import AgentConfig
from .fsm import AgentState, BehaviorController, IllegalStateError
from .grid_memory import GridMemory
from .observation import ActionCommand, CellKind, Observation, VisibleCell
from .pathfinder import AStarPathfinder, Path

__all__ = [
    'GridTankAgent',
    'CellContent',
    'Facing',
    'GridCell',
    'Move',
    'Occupancy',
    'Command',
    'PathFollower',
    'direction_to',
    'rotate',
    'rotation_for',
    'AgentConfig',
    'AgentState',
    'BehaviorController',
    'IllegalStateError',
    'GridMemory',
    'ActionCommand',
    'CellKind',
    'Observation',
    'VisibleCell',
    'AStarPathfinder',
    'Path',
]
