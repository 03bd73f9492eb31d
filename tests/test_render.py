"""Golden output for the map and search-frontier renderings."""

import os
import sys

THIS_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.dirname(THIS_DIR)
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from tank_core.cells import CellContent, Facing  # noqa: E402
from tank_core.grid_memory import GridMemory  # noqa: E402
from tank_core.observation import Observation  # noqa: E402
from tank_core.pathfinder import AStarPathfinder  # noqa: E402
from tank_core.render import render_map, render_search  # noqa: E402


def _small_map():
    memory = GridMemory(3, 2)
    memory.update([
        (0, 0, CellContent.tank(Facing.UP, 1)),
        (1, 0, CellContent.rock()),
        (2, 0, CellContent.empty()),
        (0, 1, CellContent.destroyed_tank()),
        (2, 1, CellContent.tank(Facing.LEFT, 2)),
    ], own_id=1)
    return memory


def test_render_map_with_stats():
    obs = Observation(
        my_id=1, x=0, y=0, facing="up", grid_width=3, grid_height=2, vision_radius=5,
        kills=2, shots_fired=7, empty_seen=1, rocks_seen=1, score=5,
    )
    expected = (
        "  012\n"
        "  ---\n"
        "1|D <|1\n"
        "0|^#.|0\n"
        "  ---\n"
        "  012\n"
        "Your tank at (0,0). Empty: 1, Rock: 1, Shots: 7, Kills: 2, Score: 5.\n"
    )
    assert render_map(_small_map(), obs) == expected


def test_render_map_without_stats():
    text = render_map(GridMemory(2, 1))
    assert text == "  01\n  --\n0|  |0\n  --\n  01\n"


def _searched_3x3():
    memory = GridMemory(3, 3)
    memory.update([(x, y, CellContent.empty()) for x in range(3) for y in range(3)])
    finder = AStarPathfinder(memory)
    path = finder.find_path((0, 0), (2, 2))
    return memory, finder, path


def test_render_search_frontier():
    memory, finder, path = _searched_3x3()
    assert render_search(memory, finder, path) == "..T\noop\nSpp\n"


def test_render_search_marks_own_tank_and_blocked():
    memory, finder, path = _searched_3x3()
    text = render_search(memory, finder, None, own_position=(1, 2), own_facing=Facing.LEFT)
    assert text == ".<T\noox\nSxx\n"

    memory.update([(0, 2, CellContent.rock())])
    text = render_search(memory, finder, path)
    assert text.splitlines()[0] == "#.T"
