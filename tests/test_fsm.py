"""
Explore/Battle FSM.

Sprawdza:
- wykrycie wroga w linii i celowanie (obrót, potem strzał),
- lepkość stanu BATTLE po utracie kontaktu,
- wyjście z BATTLE po zabójstwie albo po limicie ticków,
- eksplorację nieznanych pól przez A*.
"""

import os
import sys

THIS_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.dirname(THIS_DIR)
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

import pytest  # noqa: E402

from tank_core.agent import GridTankAgent  # noqa: E402
from tank_core.cells import Facing, Move  # noqa: E402
from tank_core.commands import Command, rotate  # noqa: E402
from tank_core.config import AgentConfig  # noqa: E402
from tank_core.fsm import AgentState, BehaviorController, IllegalStateError  # noqa: E402
from tank_core.geometry import manhattan, step  # noqa: E402
from tank_core.observation import Observation  # noqa: E402

ME = 1
ENEMY = 2


def _tank(facing):
    return "tank_" + facing.value


def _observe(x, y, facing, cells, width=10, height=10, radius=5, kills=0):
    visible = [{"x": x, "y": y, "contents": _tank(facing), "player": ME}]
    visible.extend(cells)
    return Observation(
        my_id=ME,
        x=x,
        y=y,
        facing=facing,
        visible_cells=visible,
        grid_width=width,
        grid_height=height,
        vision_radius=radius,
        kills=kills,
    )


def _row(y, xs, enemy_at=None, rock_at=None):
    cells = []
    for x in xs:
        if enemy_at == (x, y):
            cells.append({"x": x, "y": y, "contents": "tank_left", "player": ENEMY})
        elif rock_at == (x, y):
            cells.append({"x": x, "y": y, "contents": "rock"})
        else:
            cells.append({"x": x, "y": y, "contents": "empty"})
    return cells


def _agent(**overrides):
    config = AgentConfig(seed=overrides.pop("seed", 3), verbose=False, **overrides)
    return GridTankAgent(name="FsmTest", config=config)


def test_engagement_rotates_then_fires():
    agent = _agent()
    cells = _row(0, range(1, 6), enemy_at=(3, 0))

    first = agent.get_action(_observe(0, 0, Facing.UP, cells))
    assert agent.state is AgentState.BATTLE
    assert agent.controller.target_tank == (3, 0)
    assert first == Command(Move.ROTATE_RIGHT)

    second = agent.get_action(_observe(0, 0, Facing.RIGHT, cells))
    assert second == Command(Move.STAY, fire=True)


def test_enemy_in_sight_rules():
    agent = _agent()
    agent.get_action(_observe(0, 0, Facing.UP, []))
    controller = agent.controller

    aligned = _observe(0, 0, Facing.UP, _row(0, range(1, 6), enemy_at=(3, 0)))
    assert controller.enemy_in_sight(aligned) == (3, 0)

    too_far = _observe(0, 0, Facing.UP, _row(0, range(1, 9), enemy_at=(7, 0)))
    assert controller.enemy_in_sight(too_far) is None

    diagonal = _observe(0, 0, Facing.UP, [{"x": 2, "y": 2, "contents": "tank_up", "player": ENEMY}])
    assert controller.enemy_in_sight(diagonal) is None

    friendly = _observe(0, 0, Facing.UP, [{"x": 0, "y": 3, "contents": "tank_up", "player": ME}])
    assert controller.enemy_in_sight(friendly) is None

    vertical = _observe(2, 0, Facing.UP, [{"x": 2, "y": 4, "contents": "tank_down", "player": ENEMY}])
    assert controller.enemy_in_sight(vertical) == (2, 4)


def test_rock_blocks_sightline():
    agent = _agent()
    cells = _row(0, range(1, 6), enemy_at=(3, 0), rock_at=(2, 0))
    command = agent.get_action(_observe(0, 0, Facing.UP, cells))
    assert agent.state is AgentState.EXPLORE
    assert agent.controller.target_tank is None
    assert not command.fire


def test_intervening_tank_does_not_block_sightline():
    agent = _agent()
    cells = [
        {"x": 4, "y": 0, "contents": "tank_left", "player": ENEMY},
        {"x": 2, "y": 0, "contents": "tank_up", "player": 3},
        {"x": 1, "y": 0, "contents": "empty"},
        {"x": 3, "y": 0, "contents": "empty"},
    ]
    agent.get_action(_observe(0, 0, Facing.UP, cells))
    assert agent.state is AgentState.BATTLE
    assert agent.controller.target_tank == (4, 0)


def test_battle_is_sticky_after_enemy_disappears():
    agent = _agent()
    agent.get_action(_observe(0, 0, Facing.UP, _row(0, range(1, 6), enemy_at=(3, 0))))

    gone = _row(0, range(1, 6))
    command = agent.get_action(_observe(0, 0, Facing.RIGHT, gone))
    assert agent.state is AgentState.BATTLE
    assert command == Command.shoot()
    assert agent.controller.target_tank == (3, 0)


def test_shot_cap_counts_battle_ticks_not_shots():
    # The first tick is a rotation, yet it counts toward the cap like the shots.
    agent = _agent(shot_cap=5)
    agent.get_action(_observe(0, 0, Facing.UP, _row(0, range(1, 6), enemy_at=(3, 0))))

    gone = _row(0, range(1, 6))
    for _ in range(4):
        command = agent.get_action(_observe(0, 0, Facing.RIGHT, gone))
        assert agent.state is AgentState.BATTLE
        assert command.fire
    assert agent.controller.battle_ticks == 5

    command = agent.get_action(_observe(0, 0, Facing.RIGHT, gone))
    assert agent.state is AgentState.EXPLORE
    assert not command.fire
    assert agent.controller.target_tank is None
    assert agent.controller.battle_ticks == 0


def test_kill_ends_battle():
    agent = _agent()
    agent.get_action(_observe(0, 0, Facing.UP, _row(0, range(1, 6), enemy_at=(3, 0))))

    wreck = _row(0, [1, 2, 4, 5]) + [{"x": 3, "y": 0, "contents": "destroyed_tank"}]
    command = agent.get_action(_observe(0, 0, Facing.RIGHT, wreck, kills=1))
    assert agent.state is AgentState.EXPLORE
    assert not command.fire
    assert agent.controller.in_battle is False


def test_target_is_reread_while_sticky():
    agent = _agent()
    agent.get_action(_observe(0, 0, Facing.UP, _row(0, range(1, 6), enemy_at=(3, 0))))

    # We slid one row up; enemy is out of sight but (3, 0) is one row off.
    command = agent.get_action(_observe(0, 1, Facing.RIGHT, []))
    assert agent.state is AgentState.BATTLE
    assert command == Command(Move.ROTATE_RIGHT)

    command = agent.get_action(_observe(0, 1, Facing.DOWN, []))
    assert command == Command(Move.DOWN)


def test_approach_rules():
    approach = BehaviorController._approach
    assert approach(1, 3, Facing.RIGHT) == Command(Move.RIGHT)
    assert approach(1, 3, Facing.UP) == Command(Move.ROTATE_RIGHT)
    assert approach(-1, 4, Facing.LEFT) == Command(Move.LEFT)
    assert approach(3, -1, Facing.DOWN) == Command(Move.DOWN)
    assert approach(1, 1, Facing.UP) == Command(Move.UP)
    assert approach(1, 1, Facing.LEFT) == Command(Move.ROTATE_LEFT)
    assert approach(2, 2, Facing.UP) is None
    assert approach(3, 0, Facing.UP) is None


def test_aim_rules():
    aim = BehaviorController._aim
    assert aim(0, 4, Facing.UP) == Command.shoot()
    assert aim(0, 4, Facing.DOWN) == Command(Move.ROTATE_LEFT)
    assert aim(0, -2, Facing.RIGHT) == Command(Move.ROTATE_RIGHT)
    assert aim(-3, 0, Facing.LEFT) == Command.shoot()
    assert aim(-3, 0, Facing.UP) == Command(Move.ROTATE_LEFT)
    assert aim(2, 2, Facing.UP) is None
    assert aim(0, 0, Facing.UP) is None


def test_unmatched_offset_drops_battle_without_new_command():
    agent = _agent()
    agent.get_action(_observe(0, 0, Facing.UP, _row(0, range(1, 6), enemy_at=(3, 0))))
    battle_command = agent.controller.battle_command
    ticks = agent.controller.battle_ticks

    command = agent.get_action(_observe(1, 2, Facing.UP, []))
    assert agent.controller.in_battle is False
    assert agent.state is AgentState.EXPLORE
    assert agent.controller.battle_command == battle_command
    assert agent.controller.battle_ticks == ticks
    assert command == agent.controller.explore_command
    assert not command.fire


def test_first_tick_picks_unseen_target_and_path():
    agent = _agent(seed=11)
    cells = [{"x": 0, "y": 1, "contents": "empty"}, {"x": 1, "y": 0, "contents": "empty"}]
    command = agent.get_action(_observe(0, 0, Facing.UP, cells, width=5, height=5))

    controller = agent.controller
    target = controller.explore_target
    assert target is not None
    assert not agent.memory.cell(*target).seen
    assert controller.path.goal == target
    assert controller.explore_command == command
    assert command.move is not Move.STAY
    assert not command.fire


def test_idle_when_everything_seen():
    agent = _agent()
    cells = [
        {"x": x, "y": y, "contents": "empty"}
        for x in range(3) for y in range(3) if (x, y) != (1, 1)
    ]
    command = agent.get_action(_observe(1, 1, Facing.UP, cells, width=3, height=3))
    assert agent.controller.explore_target == (1, 1)
    assert command == Command.stay()


def test_replans_when_path_becomes_blocked():
    agent = _agent()
    first = agent.get_action(_observe(0, 0, Facing.UP, [], width=5, height=1))
    assert first == Command(Move.ROTATE_RIGHT)
    assert agent.controller.path.next_step() == (1, 0)

    rock = [{"x": 1, "y": 0, "contents": "rock"}]
    second = agent.get_action(_observe(0, 0, Facing.RIGHT, rock, width=5, height=1))
    # Everything unseen now sits behind the rock.
    assert second == Command.stay()
    assert agent.controller.explore_target == (0, 0)


def test_illegal_state_raises():
    agent = _agent()
    obs = _observe(0, 0, Facing.UP, [])
    agent.get_action(obs)
    agent.controller._handlers.pop(AgentState.EXPLORE)
    with pytest.raises(IllegalStateError):
        agent.controller.decide(obs)


class _EmptyWorld:
    """Minimal host: open grid, vision radius, one command per tick."""

    def __init__(self, width, height, radius):
        self.width, self.height, self.radius = width, height, radius
        self.position = (0, 0)
        self.facing = Facing.UP

    def observe(self):
        x0, y0 = self.position
        cells = [
            {"x": x, "y": y, "contents": "empty"}
            for x in range(self.width)
            for y in range(self.height)
            if (x, y) != self.position and manhattan((x, y), self.position) <= self.radius
        ]
        return _observe(x0, y0, self.facing, cells, self.width, self.height, self.radius)

    def apply(self, command):
        if command.move in (Move.ROTATE_LEFT, Move.ROTATE_RIGHT):
            self.facing = rotate(self.facing, command.move)
        elif command.move is not Move.STAY:
            nxt = step(self.position, command.move)
            if 0 <= nxt[0] < self.width and 0 <= nxt[1] < self.height:
                self.position = nxt


def _run(agent, world, ticks):
    commands = []
    for _ in range(ticks):
        command = agent.get_action(world.observe())
        commands.append(command)
        world.apply(command)
    return commands


def test_exploration_is_reproducible_with_seed():
    runs = [_run(_agent(seed=5), _EmptyWorld(8, 8, 2), 60) for _ in range(2)]
    assert runs[0] == runs[1]


def test_exploration_eventually_sees_whole_open_grid():
    agent = _agent(seed=1)
    world = _EmptyWorld(6, 6, 1)
    commands = _run(agent, world, 600)

    assert agent.memory.seen_mask().all()
    assert not any(command.fire for command in commands)
    assert agent.controller.explore_target == world.position
    assert commands[-1] == Command.stay()
