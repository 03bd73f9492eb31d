"""
A* Pathfinder
Najkrótsza ścieżka po siatce 4-sąsiedztwa z odcięciem przeszkód.

Per-cell bookkeeping is never reset. Each search bumps `epoch`, and a cell's
open/closed/goal marks count only while they equal the current epoch, so
several searches per tick cost nothing beyond the cells they actually touch.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from .cells import GridCell
from .geometry import in_bounds, manhattan, neighbors4
from .grid_memory import GridMemory


class Path:
    """Steps after the start up to and including the goal, with a cursor."""

    def __init__(self, start: Tuple[int, int], steps: List[Tuple[int, int]]):
        self.start = start
        self.steps = steps
        self.cursor = 0

    @property
    def goal(self) -> Tuple[int, int]:
        return self.steps[-1] if self.steps else self.start

    @property
    def finished(self) -> bool:
        return self.cursor >= len(self.steps)

    def next_step(self) -> Optional[Tuple[int, int]]:
        if self.finished:
            return None
        return self.steps[self.cursor]

    def advance(self) -> None:
        self.cursor += 1

    def remaining(self) -> List[Tuple[int, int]]:
        return self.steps[self.cursor:]

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(self.steps)

    def __contains__(self, cell: object) -> bool:
        return cell in self.steps

    def __repr__(self) -> str:
        return f"Path(start={self.start}, steps={self.steps}, cursor={self.cursor})"


class AStarPathfinder:
    def __init__(self, memory: GridMemory):
        self.memory = memory
        self.epoch = 0
        # Sorted ascending by f; a new node goes before existing equal-f nodes.
        self.open_list: List[GridCell] = []
        self.start: Optional[GridCell] = None
        self.target: Optional[GridCell] = None

    def find_path(self, start: Tuple[int, int], goal: Tuple[int, int]) -> Optional[Path]:
        """
        Shortest path from `start` to `goal` over unblocked cells.

        Returns:
            Path (empty when start == goal) or None when the goal is unreachable.
        """
        if start == goal:
            return Path(start, [])

        self.epoch += 1
        memory = self.memory

        target = memory.cell(*goal)
        target.goal_epoch = self.epoch
        self.target = target

        origin = memory.cell(*start)
        origin.g = 0
        origin.h = manhattan(start, goal)
        self.start = origin

        self.open_list = []
        first = self._reachable_neighbors(origin)
        if not first:
            return None

        for cell in first:
            if cell.goal_epoch == self.epoch:
                self._set_parent(cell, origin)
                return Path(start, [cell.pos])
            self._add_to_open_list(cell, origin)

        origin.closed_epoch = self.epoch
        return self._search()

    def _search(self) -> Optional[Path]:
        while self.open_list:
            current = self.open_list[0]
            if current.goal_epoch == self.epoch:
                return self._reconstruct(current)

            self.open_list.pop(0)
            current.closed_epoch = self.epoch
            current.open_epoch = -1

            for neighbor in self._reachable_neighbors(current):
                if neighbor.closed_epoch == self.epoch:
                    continue
                if neighbor.open_epoch == self.epoch:
                    self._relax(neighbor, current)
                else:
                    self._add_to_open_list(neighbor, current)

        return None

    def _add_to_open_list(self, cell: GridCell, parent: GridCell) -> None:
        cell.g = parent.g + 1
        cell.h = manhattan(cell.pos, self.target.pos)
        cell.closed_epoch = -1
        cell.open_epoch = self.epoch
        self._set_parent(cell, parent)
        self._insert_sorted(cell)

    def _relax(self, cell: GridCell, parent: GridCell) -> None:
        if cell.g > parent.g + 1:
            cell.g = parent.g + 1
            self._set_parent(cell, parent)
            self.open_list.remove(cell)
            self._insert_sorted(cell)

    def _insert_sorted(self, cell: GridCell) -> None:
        f = cell.f
        idx = len(self.open_list)
        for i, queued in enumerate(self.open_list):
            if queued.f >= f:
                idx = i
                break
        self.open_list.insert(idx, cell)

    def _set_parent(self, cell: GridCell, parent: GridCell) -> None:
        cell.parent = parent.pos
        cell.parent_epoch = self.epoch

    def _reconstruct(self, goal: GridCell) -> Path:
        steps: List[Tuple[int, int]] = []
        current = goal
        while current is not self.start:
            steps.append(current.pos)
            parent = current.parent_in(self.epoch)
            if parent is None:
                raise RuntimeError(f"Broken parent chain at {current.pos} in epoch {self.epoch}")
            current = self.memory.cell(*parent)
        steps.reverse()
        return Path(self.start.pos, steps)

    def _reachable_neighbors(self, cell: GridCell) -> List[GridCell]:
        memory = self.memory
        out: List[GridCell] = []
        for nx, ny in neighbors4(cell.pos):
            if in_bounds((nx, ny), memory.width, memory.height) and not memory.is_blocked(nx, ny):
                out.append(memory.cells[nx][ny])
        return out

    def is_open(self, cell: GridCell) -> bool:
        return cell.open_epoch == self.epoch

    def is_closed(self, cell: GridCell) -> bool:
        return cell.closed_epoch == self.epoch

    def open_head(self) -> Optional[GridCell]:
        return self.open_list[0] if self.open_list else None
